"""KServe 텍스트 임베딩 클라이언트 — payload / 응답 파싱"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from catalog_sync.embedder import EmbeddingClient


def test_v2_payload_and_response():
    client = EmbeddingClient("http://localhost:8080/", "text_embedding")
    assert client.url == "http://localhost:8080/v2/models/text_embedding/infer"

    payload = client._build_payload(["Blue Widget", "Red Widget"])
    assert payload["inputs"][0]["datatype"] == "BYTES"
    assert payload["inputs"][0]["shape"] == [2]

    resp = MagicMock()
    resp.json.return_value = {
        "outputs": [{"name": "embedding", "shape": [2, 3], "data": [1, 2, 3, 4, 5, 6]}]
    }
    client.session = MagicMock()
    client.session.post.return_value = resp

    vectors = client.embed(["Blue Widget", "Red Widget"])
    assert vectors.shape == (2, 3)
    assert vectors.dtype == np.float32
    assert client.embed_one("Blue Widget") == [1.0, 2.0, 3.0]
    resp.raise_for_status.assert_called()
    assert client.session.post.call_args.kwargs["timeout"] == 60


def test_v1_protocol():
    client = EmbeddingClient("http://localhost:8080", "m", protocol="v1", timeout=5)
    assert client.url == "http://localhost:8080/v1/models/m:predict"
    assert client._build_payload(["a"]) == {"instances": [{"text": "a"}]}
    parsed = client._parse_response({"predictions": [[0.5, 0.25]]})
    assert parsed.tolist() == [[0.5, 0.25]]


def test_unsupported_protocol():
    with pytest.raises(ValueError, match="grpc"):
        EmbeddingClient("http://localhost:8080", "m", protocol="grpc")
