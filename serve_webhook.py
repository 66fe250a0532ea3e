#!/usr/bin/env python3
# serve_webhook.py
"""
변경 이벤트 / 임베딩 웹훅 서버

실행:
  python serve_webhook.py
  python serve_webhook.py --host 0.0.0.0 --port 8000

  # Database webhook 설정 예
  POST http://<host>:8000/sync-search
  Authorization: Bearer <token>
"""

import argparse

import uvicorn

from catalog_sync import build_app, setup_logging
from catalog_sync.cli import add_es_arguments, add_source_arguments, config_from_args


def main():
    parser = argparse.ArgumentParser(description="catalog-sync 웹훅 서버 (FastAPI)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--cors_origin", default=None, help="default: CORS_ORIGIN")
    parser.add_argument("--kserve_url", default=None, help="default: KSERVE_URL")
    add_source_arguments(parser)
    add_es_arguments(parser)

    args = parser.parse_args()
    setup_logging()
    config = config_from_args(args, cors_origin=args.cors_origin, kserve_url=args.kserve_url)
    uvicorn.run(build_app(config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
