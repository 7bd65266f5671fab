import httpx
import pytest
from fastapi.testclient import TestClient

from lingua_insights.charts import SAMPLE_CHART
from lingua_insights.config import Settings
from lingua_insights.llm_client import AiClient
from lingua_insights.main import app, get_ai_client, get_image_transport, get_settings

from conftest import ENGLISH_TEXT, TRANSLATIONS


@pytest.fixture
def api(settings, gateway):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_ai_client] = lambda: AiClient(settings, transport=gateway.transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _upload(api, content: bytes, filename="data.csv", content_type="text/csv"):
    return api.post("/upload", files={"file": (filename, content, content_type)})


def test_root(api):
    assert api.get("/").status_code == 200


def test_languages(api):
    response = api.get("/languages")
    assert response.status_code == 200
    assert [lang["code"] for lang in response.json()] == ["english", "hindi", "kannada", "marathi"]
    assert response.json()[1]["prompt_label"] == "Hindi (हिंदी)"


def test_upload_then_analyze_end_to_end(api, gateway):
    uploaded = _upload(api, b"region,sales\nnorth,10\nsouth,12\n")
    assert uploaded.status_code == 200
    body = uploaded.json()
    assert body["file"]["name"] == "data.csv"
    assert body["data"] == {"headers": ["region", "sales"], "rows": [["north", "10"], ["south", "12"]]}

    analyzed = api.post("/analyze", json={"csv_data": body["data"]})
    assert analyzed.status_code == 200
    assert analyzed.json()["insights"] == {
        "english": ENGLISH_TEXT,
        "hindi": TRANSLATIONS["Hindi (हिंदी)"],
        "kannada": TRANSLATIONS["Kannada (ಕನ್ನಡ)"],
        "marathi": TRANSLATIONS["Marathi (मराठी)"],
    }
    assert analyzed.json()["charts"] == [SAMPLE_CHART.model_dump()]
    assert len(gateway.requests) == 4


def test_upload_rejects_wrong_type(api):
    response = _upload(api, b"hello", filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400
    assert response.json()["detail"] == "Please select a valid CSV file."


def test_upload_rejects_large_file(api, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"max_upload_bytes": 8})
    response = _upload(api, b"a,b\n1,2\n3,4\n")
    assert response.status_code == 400
    assert "too large" in response.json()["detail"]


def test_upload_parse_error(api):
    response = _upload(api, b"")
    assert response.status_code == 400
    assert response.json()["detail"] == "Error parsing CSV file. Please check the file format."


def test_analyze_rejects_misaligned_rows(api):
    response = api.post("/analyze", json={"csv_data": {"headers": ["a", "b"], "rows": [["1"]]}})
    assert response.status_code == 422


def test_analyze_failure_reports_single_message(api, gateway):
    gateway.overrides["Marathi"] = lambda r: httpx.Response(500, json={"error": {"message": "quota exceeded"}})
    response = api.post("/analyze", json={"csv_data": {"headers": ["a"], "rows": [["1"]]}})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to analyze data. AI gateway error: quota exceeded"


def test_analyze_without_credential(api, gateway):
    app.dependency_overrides[get_ai_client] = lambda: AiClient(Settings(), transport=gateway.transport)
    response = api.post("/analyze", json={"csv_data": {"headers": ["a"], "rows": []}})
    assert response.status_code == 500
    assert "OPENROUTER_API_KEY" in response.json()["detail"]
    assert gateway.requests == []


def test_chat(api, gateway):
    response = api.post("/chat", json={
        "question": "What is the total of b?",
        "csv_data": {"headers": ["a", "b"], "rows": [["1", "2"], ["3", "4"]]},
        "language": "kannada",
    })
    assert response.status_code == 200
    assert response.json() == {"answer": "Column b sums to 6."}
    assert "Kannada (ಕನ್ನಡ)" in gateway.prompt_of(gateway.requests[0])


def test_chat_requires_question(api):
    response = api.post("/chat", json={"question": "", "csv_data": {"headers": ["a"], "rows": []}})
    assert response.status_code == 422


def test_chat_failure(api, gateway):
    gateway.overrides["User Question"] = lambda r: httpx.Response(503)
    response = api.post("/chat", json={"question": "why?", "csv_data": {"headers": ["a"], "rows": []}})
    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to get a response from the AI. ")


def test_chart_download(api):
    app.dependency_overrides[get_image_transport] = lambda: httpx.MockTransport(
        lambda request: httpx.Response(200, content=b"img", headers={"content-type": "image/jpeg"})
    )
    response = api.post("/charts/download", json=SAMPLE_CHART.model_dump())
    assert response.status_code == 200
    assert response.content == b"img"
    assert 'filename="Sales_by_Region_(Example).png"' in response.headers["content-disposition"]


def test_chart_download_failure(api):
    app.dependency_overrides[get_image_transport] = lambda: httpx.MockTransport(
        lambda request: httpx.Response(500)
    )
    response = api.post("/charts/download", json=SAMPLE_CHART.model_dump())
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to download chart."


def test_upload_rejects_short_rows(api):
    response = _upload(api, b"a,b,c\n1,2,3\n7,8\n")
    assert response.status_code == 400
    assert response.json()["detail"] == "Error parsing CSV file. Please check the file format."
