import io

import numpy as np
from PIL import Image


def make_png_bytes(arr: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return buf.getvalue()


def gray_ramp() -> np.ndarray:
    return np.arange(256, dtype=np.uint8).reshape(16, 16)


def open_session(client, arr=None) -> str:
    arr = gray_ramp() if arr is None else arr
    files = {"file": ("sample.png", make_png_bytes(arr), "image/png")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 201, r.text
    return r.json()["id"]


def add_step(client, session_id, operation, **params):
    body = {"operation": operation, "params": params}
    return client.post(f"/sessions/{session_id}/history/steps", json=body)


def download_array(client, session_id) -> np.ndarray:
    r = client.get(f"/sessions/{session_id}/download")
    assert r.status_code == 200, r.text
    return np.asarray(Image.open(io.BytesIO(r.content)))


def test_root_and_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "healthy"
    assert data["capability"] in {"loading", "ready"}


def test_operations_catalog(client):
    r = client.get("/operations")
    assert r.status_code == 200
    ops = r.json()["operations"]
    assert len(ops) == 15
    gabor = next(op for op in ops if op["id"] == "Gabor Filter")
    assert len(gabor["parameters"]) == 6


def test_upload_opens_empty_session(client):
    session_id = open_session(client)
    r = client.get(f"/sessions/{session_id}")
    assert r.status_code == 200
    data = r.json()
    assert data["image"]["width"] == 16
    assert data["image"]["channels"] == 1
    assert data["history"]["past"] == []
    assert data["history"]["present"] is None
    assert data["history"]["has_result"] is False

    r = client.get(f"/sessions/{session_id}/result")
    assert r.status_code == 404


def test_upload_garbage_is_rejected(client):
    files = {"file": ("junk.png", b"not an image", "image/png")}
    r = client.post("/sessions", files=files)
    assert r.status_code == 400


def test_threshold_chain_and_download(client):
    session_id = open_session(client)
    r = add_step(client, session_id, "Thresholding", threshold=127)
    assert r.status_code == 200, r.text
    history = r.json()
    assert history["has_result"] is True
    assert history["past"] == [{"operation": "Thresholding", "params": {"threshold": 127.0}}]

    r = client.get(f"/sessions/{session_id}/download")
    assert r.headers["content-type"] == "image/png"
    assert r.headers["content-disposition"] == 'attachment; filename="processed_image.png"'

    out = download_array(client, session_id)
    ramp = gray_ramp()
    assert np.all(out[ramp <= 127] == 0)
    assert np.all(out[ramp > 127] == 255)


def test_download_as_jpeg(client):
    session_id = open_session(client)
    add_step(client, session_id, "Color Inversion")
    r = client.get(f"/sessions/{session_id}/download", params={"ext": "jpg"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert "processed_image.jpg" in r.headers["content-disposition"]

    r = client.get(f"/sessions/{session_id}/download", params={"ext": "gif"})
    assert r.status_code == 422


def test_undo_redo_and_branch_pruning(client):
    session_id = open_session(client)
    base = f"/sessions/{session_id}/history"
    add_step(client, session_id, "Color Inversion")
    add_step(client, session_id, "Thresholding", threshold=100)

    r = client.post(f"{base}/undo")
    data = r.json()
    assert [s["operation"] for s in data["past"]] == ["Color Inversion"]
    assert [s["operation"] for s in data["future"]] == ["Thresholding"]
    assert np.array_equal(download_array(client, session_id), 255 - gray_ramp())

    r = client.post(f"{base}/undo")
    assert r.json()["has_result"] is False
    assert client.get(f"/sessions/{session_id}/download").status_code == 404

    r = client.post(f"{base}/redo")
    assert r.json()["can_redo"] is True
    assert r.json()["has_result"] is True

    r = add_step(client, session_id, "Edge Detection")
    data = r.json()
    assert [s["operation"] for s in data["past"]] == ["Color Inversion", "Edge Detection"]
    assert data["future"] == []
    assert data["can_redo"] is False


def test_noop_undo_on_fresh_session(client):
    session_id = open_session(client)
    r = client.post(f"/sessions/{session_id}/history/undo")
    assert r.status_code == 200
    assert r.json()["past"] == []
    assert r.json()["generation"] == 0


def test_reset(client):
    session_id = open_session(client)
    add_step(client, session_id, "Color Inversion")
    r = client.post(f"/sessions/{session_id}/history/reset")
    assert r.status_code == 200
    assert r.json()["past"] == []
    assert r.json()["has_result"] is False


def test_invalid_steps_are_rejected(client):
    session_id = open_session(client)
    r = add_step(client, session_id, "Sepia")
    assert r.status_code == 400
    assert "Unsupported operation" in r.json()["detail"]

    r = add_step(client, session_id, "High-Pass Filtering", kernel_size=4)
    assert r.status_code == 400
    assert "kernel_size" in r.json()["detail"]

    r = add_step(client, session_id, "Multi-Scale Retinex", retinex_scales=[100000])
    assert r.status_code == 400
    assert "retinex_scales" in r.json()["detail"]

    r = client.get(f"/sessions/{session_id}/history")
    assert r.json()["past"] == []


def test_color_chain_on_rgb_upload(client):
    rgb = np.random.default_rng(5).integers(0, 256, size=(12, 10, 3), dtype=np.uint8)
    session_id = open_session(client, rgb)
    add_step(client, session_id, "COLOR_BOOSTING", boost_factor=[0, 1, 1])
    r = add_step(client, session_id, "Channel Mixing Simulation", mix_factors=[[0, 0, 1], [0, 1, 0], [1, 0, 0]])
    assert r.status_code == 200, r.text

    out = download_array(client, session_id)
    assert out.shape == (12, 10, 3)
    assert np.array_equal(out[..., 0], rgb[..., 2])
    assert not out[..., 2].any()


def test_original_download(client):
    session_id = open_session(client)
    add_step(client, session_id, "Color Inversion")
    r = client.get(f"/sessions/{session_id}/original")
    assert r.status_code == 200
    assert np.array_equal(np.asarray(Image.open(io.BytesIO(r.content))), gray_ramp())


def test_unknown_session(client):
    assert client.get("/sessions/ses_missing").status_code == 404
    assert client.get("/sessions/ses_missing/history").status_code == 404
    assert add_step(client, "ses_missing", "Color Inversion").status_code == 404
    assert client.get("/sessions/ses_missing/download").status_code == 404


def test_delete_session(client):
    session_id = open_session(client)
    assert client.delete(f"/sessions/{session_id}").status_code == 200
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert client.delete(f"/sessions/{session_id}").status_code == 404


def test_error_responses_are_documented(client):
    schema = client.get("/openapi.json").json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    steps = schema["paths"]["/sessions/{session_id}/history/steps"]["post"]["responses"]
    assert steps["400"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
