"""
Test suite for the remote processing worker application.

System role: Verification of the worker HTTP contract
"""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imgproc.configs.processing import ProcessingSettings
from imgproc.configs.settings import Settings
from imgproc.core.processing.invoker import WORKER_PROCESS_PATH, WORKER_TOKEN_HEADER
from imgproc.core.processing.processor import ImageProcessor
from imgproc.workers.worker_app import create_worker_app

BODY = {
    "inputKey": "users/u/jobs/j/input",
    "outputKey": "users/u/jobs/j/output.png",
    "ops": [{"op": "resize", "width": 12, "height": 6}],
}


@pytest.fixture
def worker_client(fake_s3) -> TestClient:
    settings = Settings(processing=ProcessingSettings(worker_token="secret"))
    app = create_worker_app(settings, processor=ImageProcessor(fake_s3))
    return TestClient(app)


class TestWorkerApp:
    """Test suite for the worker routes."""

    def test_liveness_should_return_plain_text(self, worker_client) -> None:
        """Test GET /."""
        # Act
        response = worker_client.get("/")

        # Assert
        assert response.status_code == 200
        assert response.text == "worker-ok"

    def test_process_should_write_output(self, worker_client, fake_s3, png_factory) -> None:
        """Test a successful transform."""
        # Arrange
        fake_s3.objects[BODY["inputKey"]] = png_factory()

        # Act
        response = worker_client.post(
            WORKER_PROCESS_PATH, json=BODY, headers={WORKER_TOKEN_HEADER: "secret"}
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {"ok": True, "outputKey": BODY["outputKey"]}
        output = Image.open(io.BytesIO(fake_s3.objects[BODY["outputKey"]]))
        assert output.size == (12, 6)

    @pytest.mark.parametrize("headers", [{}, {WORKER_TOKEN_HEADER: "wrong"}])
    def test_bad_token_should_return_401(self, worker_client, headers) -> None:
        """Test shared-secret enforcement."""
        # Act
        response = worker_client.post(WORKER_PROCESS_PATH, json=BODY, headers=headers)

        # Assert
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "unauthenticated"

    def test_invalid_body_should_return_400(self, worker_client) -> None:
        """Test request validation."""
        # Act
        response = worker_client.post(
            WORKER_PROCESS_PATH,
            json={"inputKey": "a", "outputKey": "b", "ops": []},
            headers={WORKER_TOKEN_HEADER: "secret"},
        )

        # Assert
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "bad_request"

    def test_missing_input_should_return_processing_failed(self, worker_client) -> None:
        """Test processing failures map to 500."""
        # Act
        response = worker_client.post(
            WORKER_PROCESS_PATH, json=BODY, headers={WORKER_TOKEN_HEADER: "secret"}
        )

        # Assert
        assert response.status_code == 500
        assert response.json()["error"] == {
            "code": "processing_failed",
            "message": "Image processing failed",
        }

    def test_open_worker_should_accept_without_token(self, fake_s3, png_factory) -> None:
        """Test no configured token means no check."""
        # Arrange
        fake_s3.objects[BODY["inputKey"]] = png_factory()
        app = create_worker_app(
            Settings(processing=ProcessingSettings(worker_token=None)),
            processor=ImageProcessor(fake_s3),
        )

        # Act
        response = TestClient(app).post(WORKER_PROCESS_PATH, json=BODY)

        # Assert
        assert response.status_code == 200

    def test_resize_past_pixel_cap_should_return_400(self, fake_s3, png_factory) -> None:
        """Test oversized resize targets are refused before reading the input."""
        # Arrange
        fake_s3.objects[BODY["inputKey"]] = png_factory()
        settings = Settings(processing=ProcessingSettings(worker_token=None, max_output_pixels=50))
        app = create_worker_app(settings, processor=ImageProcessor(fake_s3, 50))

        # Act
        response = TestClient(app).post(WORKER_PROCESS_PATH, json=BODY)

        # Assert
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "bad_request"
        assert BODY["outputKey"] not in fake_s3.objects
