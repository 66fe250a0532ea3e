"""카탈로그 동기화 설정"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .retry import RetryConfig

# 기본 CORS 헤더 (웹훅 응답 + OPTIONS preflight)
DEFAULT_CORS_ORIGIN = "https://paisan.net"


@dataclass
class Config:
    # Supabase (Relational Source)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""  # service role key

    # Elasticsearch 연결
    es_url: str = "http://localhost:9200"
    es_nodes: list[str] | None = None       # 클러스터 노드 목록 (설정 시 es_url 무시)
    es_fingerprint: str | None = None       # ES 9 TLS 인증서 SHA-256 fingerprint (클러스터 시 필수)
    es_username: str | None = None          # Basic Auth 사용자명
    es_password: str | None = None          # Basic Auth 비밀번호
    es_api_key: str | None = None           # API Key (basic_auth 대신 사용 가능)

    # 인덱스
    products_index: str = "products"
    suppliers_index: str = "suppliers"

    # 전체 재색인
    batch_size: int = 1000      # 페이지 크기 (행 수)
    batch_delay: float = 1.0    # 페이지 사이 대기 (초, 인덱스 적재 속도 제한)

    # 임베딩 작업
    kserve_url: str = "http://localhost:8080"
    embed_model: str = "text_embedding"
    embed_batch_size: int = 20
    embed_timeout: int = 60

    # 에러 로그 기록 재시도
    max_retries: int = 3            # 총 시도 횟수
    retry_backoff: float = 1.0      # 첫 재시도 대기 (초, 이후 ×2 + jitter)
    retry_max_backoff: float = 30.0

    # 웹훅
    cors_origin: str = DEFAULT_CORS_ORIGIN
    sync_rate_limit: int = 100      # 분당 요청 수 (change event)
    embed_rate_limit: int = 10      # 분당 요청 수 (embedding)
    rate_limit_window: float = 60.0

    # 로그
    log_dir: Path = field(default_factory=lambda: Path("logs"))

    @classmethod
    def from_env(cls, env_file: Path | None = None, **overrides) -> "Config":
        """환경 변수(.env 포함)로 Config 생성. overrides가 최우선."""
        load_dotenv(env_file)

        env = os.environ
        values: dict = {}
        mapping = {
            "SUPABASE_URL": "supabase_url",
            "SUPABASE_SERVICE_ROLE_KEY": "supabase_key",
            "ES_URL": "es_url",
            "ES_FINGERPRINT": "es_fingerprint",
            "ES_USERNAME": "es_username",
            "ES_PASSWORD": "es_password",
            "ES_API_KEY": "es_api_key",
            "KSERVE_URL": "kserve_url",
            "EMBED_MODEL": "embed_model",
            "CORS_ORIGIN": "cors_origin",
        }
        for var, attr in mapping.items():
            if env.get(var):
                values[attr] = env[var]

        # ES_NODES: 쉼표 구분 목록
        if env.get("ES_NODES"):
            values["es_nodes"] = [n.strip() for n in env["ES_NODES"].split(",") if n.strip()]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def retry_config(self) -> RetryConfig:
        """error_logs 기록 재시도 설정 (지수 백오프 + jitter)"""
        return RetryConfig(
            max_retries=self.max_retries,
            initial_backoff=self.retry_backoff,
            max_backoff=self.retry_max_backoff,
            jitter=True,
        )

    def require_source(self):
        """Supabase 접속 정보 확인 (작업 시작 전)"""
        if not self.supabase_url or not self.supabase_key:
            raise ValueError(
                "Supabase 접속 정보 필수: SUPABASE_URL + SUPABASE_SERVICE_ROLE_KEY 를 "
                "환경 변수 또는 --supabase_url / --supabase_key 로 지정하세요."
            )
