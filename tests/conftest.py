"""Pytest configuration and shared fixtures for the solar panel analysis pipeline.

This module provides test configuration, fixtures and data generators for
testing the imaging utilities, pipeline services and classifier backends.
"""
import io
import os
import sys
import json
import logging
import tempfile
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from solarscan.backends.stub_backend import StubClassifier
from solarscan.config.settings import Config
from solarscan.core.entities import BoundingBox, Category, Finding, Severity
from solarscan.core.raster import RasterBuffer


# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)

# Disable some verbose loggers during testing
logging.getLogger('PIL').setLevel(logging.WARNING)


@pytest.fixture(scope="session")
def project_root():
    """Provide project root directory path."""
    return PROJECT_ROOT


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any SOLARSCAN_* variables inherited from the shell."""
    for key in list(os.environ):
        if key.startswith("SOLARSCAN_"):
            monkeypatch.delenv(key, raising=False)
    yield monkeypatch


@pytest.fixture
def default_config():
    """Configuration with defaults and no enhancement surprises."""
    return Config()


@pytest.fixture
def real_config(temp_dir, clean_env):
    """Provide a configuration loaded from a temporary JSON file."""
    config_data = {
        "confidence_threshold": 0.7,
        "detail_level": "basic",
        "model_input_width": 64,
        "model_input_height": 64,
        "log_dir": str(temp_dir / "logs"),
    }
    config_file = temp_dir / "config.json"
    with open(config_file, 'w') as f:
        json.dump(config_data, f, indent=2)

    from solarscan.config.settings import load_config
    return load_config(str(config_file), env_file=str(temp_dir / "missing.env"))


class TestDataGenerator:
    """Utility class for generating test data."""

    @staticmethod
    def create_test_buffer(width: int = 64, height: int = 48, pattern: str = "random",
                           channels: int = 3, seed: int = 0) -> RasterBuffer:
        """Create a test buffer with specified dimensions and pattern.

        Args:
            width: Buffer width
            height: Buffer height
            pattern: Pattern type ('random', 'gradient', 'checkerboard', 'solid')
            channels: 3 (RGB) or 4 (RGBA)
            seed: Seed for the random pattern

        Returns:
            Generated RasterBuffer
        """
        if pattern == "random":
            rng = np.random.default_rng(seed)
            pixels = rng.integers(0, 256, (height, width, channels), dtype=np.uint8)
        elif pattern == "gradient":
            pixels = np.zeros((height, width, channels), dtype=np.uint8)
            for i in range(height):
                pixels[i, :, :] = int(255 * i / max(1, height - 1))
        elif pattern == "checkerboard":
            pixels = np.zeros((height, width, channels), dtype=np.uint8)
            square_size = 4
            for i in range(0, height, square_size):
                for j in range(0, width, square_size):
                    if (i // square_size + j // square_size) % 2 == 0:
                        pixels[i:i + square_size, j:j + square_size] = 255
        elif pattern == "solid":
            pixels = np.full((height, width, channels), 128, dtype=np.uint8)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")
        if channels == 4:
            pixels[:, :, 3] = 255
        return RasterBuffer.from_array(pixels)

    @staticmethod
    def encode_image(buf: RasterBuffer, fmt: str = "PNG") -> bytes:
        """Encode a buffer into image file bytes with Pillow."""
        image = Image.fromarray(np.array(buf.as_array()))
        out = io.BytesIO()
        image.save(out, format=fmt)
        return out.getvalue()

    @staticmethod
    def make_finding(category: Category, confidence: float = 0.9,
                     box=(0, 0, 10, 10), severity: Severity = None) -> Finding:
        from solarscan.services.finding_synthesizer import SEVERITY_BY_CATEGORY
        return Finding(
            category=category,
            confidence=confidence,
            bounding_box=BoundingBox(*box),
            severity=severity or SEVERITY_BY_CATEGORY[category],
        )


@pytest.fixture
def test_data_generator():
    """Provide the TestDataGenerator utility."""
    return TestDataGenerator


@pytest.fixture
def sample_buffer():
    """Provide a small RGB buffer with a known pattern."""
    return TestDataGenerator.create_test_buffer(40, 30, pattern="random", seed=42)


@pytest.fixture
def png_bytes():
    """Provide a 400x300 PNG image as raw bytes."""
    buf = TestDataGenerator.create_test_buffer(400, 300, pattern="gradient")
    return TestDataGenerator.encode_image(buf, "PNG")


@pytest.fixture
def make_classifier():
    """Factory for loaded stub classifiers returning fixed scores."""
    def _make(scores):
        classifier = StubClassifier(scores)
        classifier.load_model()
        return classifier
    return _make


# Test markers and utilities
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Mark tests as unit or integration by their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
