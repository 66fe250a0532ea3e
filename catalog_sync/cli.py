"""루트 CLI 스크립트 공통 인자 — Supabase / ES 클러스터 연결"""

import argparse

from .config import Config


def add_source_arguments(parser: argparse.ArgumentParser):
    source = parser.add_argument_group("Supabase 연결 (미지정 시 환경 변수)")
    source.add_argument("--supabase_url", default=None, help="SUPABASE_URL")
    source.add_argument("--supabase_key", default=None, help="SUPABASE_SERVICE_ROLE_KEY")


def add_es_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--es_url", default=None, help="단일 노드 URL (default: ES_URL 또는 localhost)")

    cluster = parser.add_argument_group("ES 클러스터 연결 (ES 9+)")
    cluster.add_argument(
        "--es_nodes", nargs="+", default=None,
        help="클러스터 노드 URL 목록 (설정 시 --es_url 무시)",
    )
    cluster.add_argument(
        "--es_fingerprint", default=None,
        help="TLS 인증서 SHA-256 fingerprint (--es_nodes 사용 시 필수)",
    )
    cluster.add_argument("--es_username", default=None, help="Basic Auth 사용자명")
    cluster.add_argument("--es_password", default=None, help="Basic Auth 비밀번호")
    cluster.add_argument(
        "--es_api_key", default=None,
        help="API Key (--es_username/--es_password 대신 사용)",
    )


def config_from_args(args: argparse.Namespace, **overrides) -> Config:
    """환경 변수 → CLI 인자 순으로 덮어쓴 Config (None 값은 무시)"""
    values = {
        name: getattr(args, name, None)
        for name in (
            "supabase_url", "supabase_key",
            "es_url", "es_nodes", "es_fingerprint",
            "es_username", "es_password", "es_api_key",
            "log_dir",
        )
    }
    values.update(overrides)
    return Config.from_env(**values)
