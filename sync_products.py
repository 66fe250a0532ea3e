#!/usr/bin/env python3
# sync_products.py
"""
Products → Elasticsearch 전체 재색인 (CLI 엔트리포인트)

사전 조건:
  .env 또는 환경 변수: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
  Elasticsearch:      docker compose up -d

실행:
  python sync_products.py
  python sync_products.py --batch_size 500 --batch_delay 0.5

  # ES 9 클러스터 + fingerprint 인증
  python sync_products.py \\
      --es_nodes https://es01:9200 https://es02:9200 \\
      --es_fingerprint "B1:2A:96:..." \\
      --es_username elastic --es_password changeme
"""

import argparse
from pathlib import Path

from catalog_sync import Config, run_reindex
from catalog_sync.cli import add_es_arguments, add_source_arguments, config_from_args


def main():
    parser = argparse.ArgumentParser(
        description="Products 테이블 → products 인덱스 전체 재색인"
    )
    parser.add_argument("--batch_size", type=int, default=Config().batch_size)
    parser.add_argument(
        "--batch_delay", type=float, default=Config().batch_delay,
        help="페이지 사이 대기 시간 (초)",
    )
    parser.add_argument("--index", default=Config().products_index)
    parser.add_argument("--log_dir", type=Path, default=None)
    add_source_arguments(parser)
    add_es_arguments(parser)

    args = parser.parse_args()
    config = config_from_args(
        args,
        batch_size=args.batch_size,
        batch_delay=args.batch_delay,
        products_index=args.index,
    )
    run_reindex(config)


if __name__ == "__main__":
    main()
