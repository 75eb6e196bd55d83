"""
AI product image analysis.

Sends product photos to a vision model and turns its JSON answer into a
ProductAnalysis. Analysis never raises for API or parsing problems: the
caller gets a manual-entry record with the error attached instead.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from ..common.text_utils import generate_handle
from ..models import Product

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """You are an expert data entry operator with 15+ years of experience creating supplement product listings for Shopify stores. Your job is to extract COMPLETE and ACCURATE product information that requires minimal human review.

{intro} and extract ALL possible product details for a professional Shopify listing.

EXTRACT EVERY DETAIL VISIBLE and return ONLY valid JSON in this exact format:
{{
  "title": "Complete SEO-optimized product title with brand, product name, strength, and key benefits",
  "vendor": "Exact brand/manufacturer name as shown on packaging",
  "type": "Specific product category (Supplement, Vitamin, Protein, Pre-Workout, Post-Workout, Mineral, Herbal, Tea)",
  "tags": "Comprehensive Shopify tags: Health, Wellness, specific benefits, target audience, ingredients",
  "sku": "Professional SKU based on brand-product-strength format",
  "benefits": "Detailed health benefits and effects extracted from packaging",
  "detailedIngredients": "Complete ingredient list with exact amounts, percentages, and daily values",
  "certifications": "All visible certifications (GMP, FDA, Organic, Non-GMO, Third-Party Tested, etc.)",
  "ageGroup": "Target age group based on product (Adult, Teen, Senior, All Ages)",
  "dietaryPreferences": "All dietary information (Vegan, Vegetarian, Gluten-Free, Kosher, Halal, etc.)",
  "flavor": "Product flavor or taste (Unflavored, Natural, Berry, Chocolate, Vanilla, etc.)",
  "servingSize": "Exact serving size from supplement facts panel",
  "servingsPerContainer": "Exact number of servings per container from label",
  "seoTitle": "SEO-optimized title under 60 characters for search engines",
  "seoDescription": "SEO meta description under 160 characters highlighting key benefits",
  "productCategory": "Full Shopify category path like: Health & Beauty > Health Care > Fitness & Nutrition > Vitamins & Supplements > [Specific Type]",
  "howToUse": "Exact directions for use from packaging (dosage, timing, instructions)",
  "warnings": "All warnings, contraindications, and safety information from packaging"
}}

FORMAT REQUIREMENTS:
- benefits and detailedIngredients: simple comma-separated text, not JSON arrays
- Fill ALL fields with meaningful, accurate information"""

# JSON key in the model answer -> ProductAnalysis attribute
_RESPONSE_KEYS = {
    'title': 'title',
    'description': 'description',
    'vendor': 'vendor',
    'type': 'product_type',
    'tags': 'tags',
    'price': 'price',
    'weight': 'weight',
    'sku': 'sku',
    'benefits': 'benefits',
    'detailedIngredients': 'detailed_ingredients',
    'certifications': 'certifications',
    'ageGroup': 'age_group',
    'dietaryPreferences': 'dietary_preferences',
    'flavor': 'flavor',
    'servingSize': 'serving_size',
    'servingsPerContainer': 'servings_per_container',
    'seoTitle': 'seo_title',
    'seoDescription': 'seo_description',
    'productCategory': 'product_category',
    'ingredientCategory': 'ingredient_category',
    'howToUse': 'how_to_use',
    'warnings': 'warnings',
    'confidence': 'confidence',
    'imagesAnalyzed': 'images_analyzed',
}

# Filled in when the model leaves them out
_REQUIRED_DEFAULTS = {
    'title': 'Unknown Product',
    'description': 'Information not available',
    'vendor': 'Unknown Brand',
    'product_type': 'Supplement',
}


class AnalysisError(Exception):
    """The vision API call or its answer was unusable."""


@dataclass
class ProductAnalysis:
    """Product attributes guessed from images."""
    title: str = ''
    description: str = ''
    vendor: str = ''
    product_type: str = ''
    tags: Any = ''
    price: Any = None
    weight: Any = None
    sku: str = ''
    benefits: Any = ''
    detailed_ingredients: Any = ''
    certifications: Any = ''
    age_group: str = ''
    dietary_preferences: Any = ''
    flavor: str = ''
    serving_size: str = ''
    servings_per_container: Any = ''
    seo_title: str = ''
    seo_description: str = ''
    product_category: str = ''
    ingredient_category: str = ''
    how_to_use: str = ''
    warnings: Any = ''
    confidence: Optional[float] = None
    images_analyzed: int = 0
    error: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any], images_analyzed: int) -> 'ProductAnalysis':
        """Build from the model's JSON object, filling required defaults."""
        values = {}
        for key, value in data.items():
            name = _RESPONSE_KEYS.get(key)
            if name and value is not None:
                values[name] = _as_text(value) if name not in ('confidence', 'images_analyzed') else value
        for name, default in _REQUIRED_DEFAULTS.items():
            if not values.get(name):
                values[name] = default
        values.setdefault('images_analyzed', images_analyzed)
        return cls(**values)

    @classmethod
    def manual_entry(cls, images_analyzed: int, error: str) -> 'ProductAnalysis':
        """Placeholder record asking for manual entry after a failed analysis."""
        return cls(
            title='Analysis Failed - Manual Entry Required',
            description='<p>Unable to analyze product images automatically. '
                        'Please enter product details manually.</p>',
            vendor='Unknown Brand',
            product_type='Supplement',
            tags='Health, Supplement, Manual Entry Required',
            price=0,
            weight=0,
            sku='PENDING-MANUAL',
            benefits='Please enter health benefits manually',
            detailed_ingredients='Please enter complete ingredient list',
            certifications='Check package for certifications',
            age_group='Adult',
            dietary_preferences='Check package for dietary information',
            flavor='Check package for flavor information',
            serving_size='Check supplement facts panel',
            servings_per_container='Check supplement facts panel',
            seo_title='Manual Entry Required',
            seo_description='Please create SEO description manually based on product benefits',
            product_category='Health & Beauty > Health Care > Fitness & Nutrition > Vitamins & Supplements',
            ingredient_category='Please categorize ingredients manually',
            how_to_use='Please enter usage instructions manually',
            warnings='Please enter warnings and safety information manually',
            confidence=0,
            images_analyzed=images_analyzed,
            error=error,
        )

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_product(self, image_urls: Sequence[str], image_alt_text: Optional[str] = None) -> Product:
        """
        Draft product pre-filled from this analysis.

        The draft is unpublished with status "draft"; the first image becomes
        Image Src and the full list is kept as Image URLs.
        """
        urls = list(image_urls)
        return Product(
            handle=generate_handle(self.title),
            title=self.title,
            body_html=self.description or None,
            vendor=self.vendor,
            product_type=self.product_type,
            product_category=self.product_category or None,
            tags=self.tags or None,
            sku=self.sku or None,
            price=self.price or None,
            grams=self.weight or None,
            inventory_qty=0,
            published=False,
            status='draft',
            image_urls=json.dumps(urls) if urls else None,
            image_src=urls[0] if urls else None,
            image_alt_text=image_alt_text or (f"{self.title} - {self.vendor}" if urls else None),
            seo_title=self.seo_title or None,
            seo_description=self.seo_description or None,
            benefits=self.benefits or None,
            detailed_ingredients=self.detailed_ingredients or None,
            certifications=self.certifications or None,
            age_group=self.age_group or None,
            dietary_preferences=self.dietary_preferences or None,
            flavor=self.flavor or None,
            serving_size=self.serving_size or None,
            servings_per_container=self.servings_per_container or None,
            how_to_use=self.how_to_use or None,
            warnings=self.warnings or None,
        )


def _as_text(value: Any) -> Any:
    # Lists from the model become comma-separated text
    if isinstance(value, list):
        return ', '.join(str(item) for item in value)
    return value


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the JSON object out of a model answer.

    Strips markdown code fences and any prose around the outermost braces.

    Raises:
        AnalysisError: If no JSON object can be decoded
    """
    cleaned = text.strip()
    cleaned = re.sub(r'```json\n?', '', cleaned)
    cleaned = re.sub(r'```\n?', '', cleaned)

    match = re.search(r'\{[\s\S]*\}', cleaned)
    candidate = match.group(0) if match else cleaned

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Failed to parse model JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise AnalysisError("Model answer is not a JSON object")
    return parsed


def normalize_image_urls(image_urls: Union[str, Sequence[str], None]) -> List[str]:
    """Accept one URL or a list of URLs; drop empties."""
    if not image_urls:
        return []
    if isinstance(image_urls, str):
        return [image_urls]
    return [url for url in image_urls if url]


class AIAnalyzer(ABC):
    """Turns product images into a ProductAnalysis."""

    @abstractmethod
    def analyze(self, image_urls: Union[str, Sequence[str]]) -> ProductAnalysis:
        """Analyze one image URL or several images of the same product."""


class OpenAIVisionAnalyzer(AIAnalyzer):
    """
    Analyzer using the OpenAI Responses API with image input.

    Usage:
        analyzer = OpenAIVisionAnalyzer(api_key=os.environ["OPENAI_API_KEY"])
        analysis = analyzer.analyze(["https://.../front.jpg", "https://.../back.jpg"])
    """

    API_URL = "https://api.openai.com/v1/responses"
    DEFAULT_MODEL = "gpt-4.1-mini"

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, api_url: str = API_URL, timeout: int = 90):
        self.model = model
        self.api_url = api_url
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def build_payload(self, image_urls: List[str]) -> Dict[str, Any]:
        if len(image_urls) > 1:
            intro = f"Analyze these {len(image_urls)} product images together"
        else:
            intro = "Analyze this product image"

        content = [{"type": "input_text", "text": ANALYSIS_PROMPT.format(intro=intro)}]
        content.extend({"type": "input_image", "image_url": url} for url in image_urls)

        return {"model": self.model, "input": [{"role": "user", "content": content}]}

    def _request(self, image_urls: List[str]) -> str:
        """
        Call the API and return the model's text output.

        Raises:
            AnalysisError: On HTTP failure or a response without text
        """
        try:
            response = self.session.post(self.api_url, json=self.build_payload(image_urls), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise AnalysisError(f"OpenAI request failed: {e}") from e

        if response.status_code >= 400:
            raise AnalysisError(f"OpenAI API error: {response.status_code} - {response.text[:500]}")

        try:
            data = response.json()
        except ValueError as e:
            raise AnalysisError("OpenAI response is not JSON") from e

        for item in data.get("output") or []:
            for part in item.get("content") or []:
                if part.get("type") == "output_text" and part.get("text"):
                    return part["text"]

        raise AnalysisError("No content received from OpenAI")

    def analyze(self, image_urls: Union[str, Sequence[str]]) -> ProductAnalysis:
        """
        Analyze product images.

        Raises:
            ValueError: If no image URL is given
        """
        urls = normalize_image_urls(image_urls)
        if not urls:
            raise ValueError("Missing imageUrl or imageUrls")

        try:
            text = self._request(urls)
            analysis = ProductAnalysis.from_response(extract_json_object(text), images_analyzed=len(urls))
        except AnalysisError as e:
            logger.error("Analysis error: %s", e)
            return ProductAnalysis.manual_entry(images_analyzed=len(urls), error=str(e))

        logger.info("Analyzed %d image(s): %s", len(urls), analysis.title)
        return analysis

