#!/usr/bin/env python3
# embed_products.py
"""
Products 제목 → KServe 임베딩 → Products.embedding 컬럼

사전 조건:
  KServe 서버 (텍스트 입력 모델): KSERVE_URL, EMBED_MODEL

실행:
  python embed_products.py
  python embed_products.py --kserve_url http://localhost:8080 --model text_embedding
"""

import argparse
from pathlib import Path

from catalog_sync import Config, run_embed_products
from catalog_sync.cli import add_source_arguments, config_from_args


def main():
    parser = argparse.ArgumentParser(description="상품 제목 임베딩 → embedding 컬럼")
    parser.add_argument("--kserve_url", default=None, help="default: KSERVE_URL")
    parser.add_argument("--model", default=None, help="default: EMBED_MODEL")
    parser.add_argument("--batch_size", type=int, default=Config().embed_batch_size)
    parser.add_argument(
        "--batch_delay", type=float, default=Config().batch_delay,
        help="배치 사이 대기 시간 (초)",
    )
    parser.add_argument("--timeout", type=int, default=Config().embed_timeout)
    parser.add_argument("--log_dir", type=Path, default=None)
    add_source_arguments(parser)

    args = parser.parse_args()
    config = config_from_args(
        args,
        kserve_url=args.kserve_url,
        embed_model=args.model,
        embed_batch_size=args.batch_size,
        batch_delay=args.batch_delay,
        embed_timeout=args.timeout,
    )
    result = run_embed_products(config)
    if result.failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
