"""KServe V1/V2 프로토콜 텍스트 임베딩 클라이언트

텍스트를 그대로 전송 (서버 사이드 토크나이저):
  - V2: {"inputs": [{"name": "text", "datatype": "BYTES", ...}]}
  - V1: {"instances": [{"text": ...}]}
"""

from __future__ import annotations

import numpy as np
import requests

SUPPORTED_PROTOCOLS = ("v1", "v2")


class EmbeddingClient:
    """
    KServe Inference Protocol로 텍스트 임베딩을 요청.

    Args:
        base_url:   KServe 서비스 URL (예: "http://localhost:8080")
        model_name: 모델 이름
        protocol:   "v2" (기본) 또는 "v1"
        timeout:    HTTP 요청 타임아웃 (초)

    사용 예:
        client = EmbeddingClient("http://localhost:8080", "text_embedding")
        vectors = client.embed(["Blue Widget", "Red Widget"])   # (2, dim)
    """

    def __init__(
        self,
        base_url: str,
        model_name: str,
        *,
        protocol: str = "v2",
        timeout: int = 60,
    ):
        if protocol not in SUPPORTED_PROTOCOLS:
            raise ValueError(
                f"지원하지 않는 프로토콜: {protocol!r} "
                f"(지원: {', '.join(SUPPORTED_PROTOCOLS)})"
            )

        base = base_url.rstrip("/")
        self.protocol = protocol
        self.timeout = timeout
        self.session = requests.Session()

        if protocol == "v2":
            self.url = f"{base}/v2/models/{model_name}/infer"
        else:
            self.url = f"{base}/v1/models/{model_name}:predict"

    def _build_payload(self, texts: list[str]) -> dict:
        if self.protocol == "v2":
            return {
                "inputs": [{
                    "name": "text",
                    "shape": [len(texts)],
                    "datatype": "BYTES",
                    "data": texts,
                }]
            }
        return {"instances": [{"text": t} for t in texts]}

    def _parse_response(self, body: dict) -> np.ndarray:
        """프로토콜에 맞게 응답 파싱 → (N, dim) ndarray."""
        if self.protocol == "v2":
            output = body["outputs"][0]
            return np.array(output["data"], dtype=np.float32).reshape(output["shape"])
        return np.array(body["predictions"], dtype=np.float32)

    def embed(self, texts: list[str]) -> np.ndarray:
        """텍스트 리스트 → (N, dim) 임베딩 배열."""
        payload = self._build_payload(texts)
        resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        return self._parse_response(resp.json())

    def embed_one(self, text: str) -> list[float]:
        return self.embed([text])[0].tolist()
