#!/usr/bin/env python3
# populate_suppliers.py
"""
Supplier → suppliers 인덱스 (상품 수 + 상품 키워드 보강)

실행:
  python populate_suppliers.py
  python populate_suppliers.py --index suppliers_v2
"""

import argparse
from pathlib import Path

from catalog_sync import Config, run_populate_suppliers
from catalog_sync.cli import add_es_arguments, add_source_arguments, config_from_args


def main():
    parser = argparse.ArgumentParser(
        description="공급자 + 상품 키워드 → suppliers 인덱스"
    )
    parser.add_argument("--index", default=Config().suppliers_index)
    parser.add_argument("--log_dir", type=Path, default=None)
    add_source_arguments(parser)
    add_es_arguments(parser)

    args = parser.parse_args()
    run_populate_suppliers(config_from_args(args, suppliers_index=args.index))


if __name__ == "__main__":
    main()
