"""Tests for catalog_admin/ai/analyzer.py"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from catalog_admin.ai import (
    AnalysisError,
    OpenAIVisionAnalyzer,
    ProductAnalysis,
    extract_json_object,
    normalize_image_urls,
)

MODEL_ANSWER = {
    "title": "GNC Omega-3 Fish Oil 1000mg",
    "vendor": "GNC",
    "type": "Supplement",
    "benefits": ["Heart health", "Brain function"],
    "seoTitle": "GNC Omega-3 1000mg",
    "howToUse": "Take one softgel daily",
    "productCategory": "Health & Beauty > Health Care > Vitamins & Supplements",
    "confidence": 0.9,
}


def _api_response(text, status=200):
    response = MagicMock()
    response.status_code = status
    response.text = text
    response.json.return_value = {
        "output": [{"type": "message", "content": [{"type": "output_text", "text": text}]}]
    }
    return response


@pytest.fixture
def analyzer():
    return OpenAIVisionAnalyzer(api_key="sk-test")


class TestExtractJsonObject:
    def test_plain_json(self):
        assert extract_json_object('{"title": "Tea"}') == {"title": "Tea"}

    def test_code_fence(self):
        assert extract_json_object('```json\n{"title": "Tea"}\n```') == {"title": "Tea"}

    def test_surrounding_prose(self):
        assert extract_json_object('Here you go: {"title": "Tea"} Thanks!') == {"title": "Tea"}

    def test_invalid(self):
        with pytest.raises(AnalysisError):
            extract_json_object("no json here")

    def test_not_an_object(self):
        with pytest.raises(AnalysisError):
            extract_json_object("[1, 2]")


class TestNormalizeImageUrls:
    def test_single_url(self):
        assert normalize_image_urls("a.jpg") == ["a.jpg"]

    def test_list_drops_empty(self):
        assert normalize_image_urls(["a.jpg", "", None, "b.jpg"]) == ["a.jpg", "b.jpg"]

    def test_nothing(self):
        assert normalize_image_urls(None) == []
        assert normalize_image_urls([]) == []


class TestProductAnalysis:
    def test_from_response(self):
        analysis = ProductAnalysis.from_response(MODEL_ANSWER, images_analyzed=2)
        assert analysis.title == "GNC Omega-3 Fish Oil 1000mg"
        assert analysis.product_type == "Supplement"
        assert analysis.benefits == "Heart health, Brain function"
        assert analysis.confidence == 0.9
        assert analysis.images_analyzed == 2
        assert analysis.failed is False

    def test_required_defaults(self):
        analysis = ProductAnalysis.from_response({"flavor": "Lemon"}, images_analyzed=1)
        assert analysis.title == "Unknown Product"
        assert analysis.vendor == "Unknown Brand"
        assert analysis.product_type == "Supplement"
        assert analysis.description == "Information not available"

    def test_manual_entry(self):
        analysis = ProductAnalysis.manual_entry(images_analyzed=3, error="boom")
        assert analysis.failed
        assert analysis.title == "Analysis Failed - Manual Entry Required"
        assert analysis.sku == "PENDING-MANUAL"
        assert analysis.confidence == 0
        assert analysis.to_dict()["error"] == "boom"

    def test_to_product_draft(self):
        analysis = ProductAnalysis.from_response(MODEL_ANSWER, images_analyzed=2)
        product = analysis.to_product(["front.jpg", "back.jpg"])
        assert product.handle == "gnc-omega-3-fish-oil-1000mg"
        assert product.published is False
        assert product.status == "draft"
        assert product.inventory_qty == 0
        assert json.loads(product.image_urls) == ["front.jpg", "back.jpg"]
        assert product.image_src == "front.jpg"
        assert product.image_alt_text == "GNC Omega-3 Fish Oil 1000mg - GNC"
        assert product.how_to_use == "Take one softgel daily"

    def test_to_product_without_images(self):
        product = ProductAnalysis.from_response(MODEL_ANSWER, images_analyzed=0).to_product([])
        assert product.image_urls is None
        assert product.image_alt_text is None


class TestOpenAIVisionAnalyzer:
    def test_payload_single_image(self, analyzer):
        payload = analyzer.build_payload(["a.jpg"])
        content = payload["input"][0]["content"]
        assert payload["model"] == "gpt-4.1-mini"
        assert "Analyze this product image" in content[0]["text"]
        assert content[1] == {"type": "input_image", "image_url": "a.jpg"}

    def test_payload_several_images(self, analyzer):
        content = analyzer.build_payload(["a.jpg", "b.jpg"])["input"][0]["content"]
        assert "Analyze these 2 product images together" in content[0]["text"]
        assert len(content) == 3

    def test_analyze(self, analyzer):
        response = _api_response("```json\n" + json.dumps(MODEL_ANSWER) + "\n```")
        with patch.object(analyzer.session, "post", return_value=response) as mock:
            analysis = analyzer.analyze(["a.jpg", "b.jpg"])
        assert analysis.title == "GNC Omega-3 Fish Oil 1000mg"
        assert analysis.images_analyzed == 2
        assert mock.call_args.kwargs["timeout"] == 90

    def test_single_url_string(self, analyzer):
        with patch.object(analyzer.session, "post", return_value=_api_response(json.dumps(MODEL_ANSWER))):
            assert analyzer.analyze("a.jpg").images_analyzed == 1

    def test_missing_images(self, analyzer):
        with pytest.raises(ValueError, match="Missing imageUrl or imageUrls"):
            analyzer.analyze([])

    def test_http_error_gives_manual_entry(self, analyzer):
        with patch.object(analyzer.session, "post", return_value=_api_response("rate limited", status=429)):
            analysis = analyzer.analyze(["a.jpg"])
        assert analysis.failed
        assert "429" in analysis.error
        assert analysis.images_analyzed == 1

    def test_unparseable_answer_gives_manual_entry(self, analyzer):
        with patch.object(analyzer.session, "post", return_value=_api_response("I cannot see the label")):
            analysis = analyzer.analyze(["a.jpg"])
        assert analysis.failed
        assert analysis.title == "Analysis Failed - Manual Entry Required"

    def test_empty_output_gives_manual_entry(self, analyzer):
        response = MagicMock(status_code=200)
        response.json.return_value = {"output": []}
        with patch.object(analyzer.session, "post", return_value=response):
            assert analyzer.analyze(["a.jpg"]).error == "No content received from OpenAI"

    def test_connection_error_gives_manual_entry(self, analyzer):
        with patch.object(analyzer.session, "post", side_effect=requests.exceptions.ConnectionError("down")):
            assert analyzer.analyze(["a.jpg"]).failed
