"""Entry point for the CRM org chart backend in desktop mode.

Usage:
    python run_desktop.py --port 9876 [--web-dir /path/to/web/dist] [--data-file crm.json]
"""

import argparse
import os


def main() -> None:
    parser = argparse.ArgumentParser(description="CRM Org Chart Backend")
    parser.add_argument("--port", type=int, required=True, help="Port to bind to")
    parser.add_argument("--web-dir", type=str, default=None, help="Path to built chart renderer")
    parser.add_argument("--data-file", type=str, default=None, help="Path to CRM snapshot JSON")
    args = parser.parse_args()

    if args.web_dir:
        os.environ["CRM_CHART_WEB_DIR"] = args.web_dir
    if args.data_file:
        os.environ["CRM_CHART_DATA_FILE"] = args.data_file

    import uvicorn
    from app.main import app

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=args.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
