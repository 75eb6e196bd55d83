"""
Product creation from photos.

Upload images, ask the analyzer for product attributes, build a draft and
store it. Every collaborator is passed in; nothing here talks to a backend
directly.
"""

import logging
from typing import List, Optional, Sequence

from ..ai import AIAnalyzer, ProductAnalysis
from ..images import ImageFile, ImageStore, UploadedImage
from ..models import Product, StoreResult
from ..store import ProductStore

logger = logging.getLogger(__name__)


class ProductCreationFlow:
    """
    Photo-to-draft workflow.

    Usage:
        flow = ProductCreationFlow(store, image_store, analyzer)
        product, result = flow.create_from_images([ImageFile.from_path("front.jpg")])
    """

    def __init__(self, store: ProductStore, image_store: ImageStore, analyzer: AIAnalyzer):
        self.store = store
        self.image_store = image_store
        self.analyzer = analyzer

    def upload_images(self, files: Sequence[ImageFile], product_handle: Optional[str] = None) -> List[UploadedImage]:
        """Upload files in order. An ImageUploadError stops the batch."""
        return [self.image_store.upload(image, product_handle) for image in files]

    def analyze(self, image_urls: Sequence[str]) -> ProductAnalysis:
        analysis = self.analyzer.analyze(list(image_urls))
        if analysis.failed:
            logger.warning("AI analysis failed, manual entry required: %s", analysis.error)
        return analysis

    def build_draft(self, analysis: ProductAnalysis, uploaded: Sequence[UploadedImage]) -> Product:
        """Draft product from the analysis; the first upload's alt text wins."""
        urls = [image.url for image in uploaded]
        alt_text = uploaded[0].alt_text if uploaded and uploaded[0].alt_text else None
        return analysis.to_product(urls, image_alt_text=alt_text or analysis.title)

    def create_from_images(
        self,
        files: Sequence[ImageFile],
        product_handle: Optional[str] = None,
        save: bool = True,
    ) -> tuple[Product, Optional[StoreResult]]:
        """
        Run the whole flow.

        Args:
            files: Product photos (at least one)
            product_handle: Handle used to name uploaded objects
            save: Store the draft (False returns it unsaved for review)

        Returns:
            Tuple of (draft product, store result or None when not saved)
        """
        if not files:
            raise ValueError("At least one image is required")

        uploaded = self.upload_images(files, product_handle)
        analysis = self.analyze([image.url for image in uploaded])
        draft = self.build_draft(analysis, uploaded)

        if not save:
            return draft, None

        result = self.store.create_product(draft)
        if not result.success:
            logger.error("Could not store draft %s: %s", draft.handle, result.error)
        return draft, result
