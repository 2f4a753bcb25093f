"""Local development entry point.

Usage:
    python run.py

Reads .env from the project root, then serves on PORT (default 3000).
"""

from dotenv import load_dotenv

load_dotenv()  # Load .env before anything else

from smart_checkout import create_app

app = create_app()

if __name__ == "__main__":
    port = app.config["PORT"]
    base = f"http://localhost:{port}"
    app.logger.info(f"Server running at {base}")
    app.logger.info(f"Metrics available at {base}/metrics")
    app.logger.info(f"Health check at {base}/health")
    app.logger.info(f"App info at {base}/info")
    app.run(debug=app.debug, host="0.0.0.0", port=port)
