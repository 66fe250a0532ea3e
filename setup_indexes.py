#!/usr/bin/env python3
# setup_indexes.py
"""
products / suppliers 인덱스 생성 + 검색 설정 적용 (반복 실행 안전)

실행:
  python setup_indexes.py
  python setup_indexes.py --es_url http://localhost:9200
"""

import argparse

from catalog_sync import run_setup_indexes
from catalog_sync.cli import add_es_arguments, config_from_args


def main():
    parser = argparse.ArgumentParser(description="검색 인덱스 생성 + 설정")
    add_es_arguments(parser)
    args = parser.parse_args()
    run_setup_indexes(config_from_args(args))


if __name__ == "__main__":
    main()
