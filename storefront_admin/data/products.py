"""
Product catalogue management: validation, image upload and persistence.
"""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional

from ..core.config import PRODUCTS
from ..core.exceptions import ValidationError
from ..core.utils import to_iso, utc_now
from .blob_storage import (
    BlobStorage,
    get_file_extension,
    stream_size,
    validate_file_size,
    validate_file_type,
)
from .document_store import Condition, DocumentStore

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 20
ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp", "image/gif"]
MAX_IMAGE_SIZE_MB = 5


@dataclass
class ImageUpload:
    filename: str
    stream: BinaryIO
    content_type: Optional[str] = None


@dataclass
class ProductInput:
    """Product form data as entered; price and quantity are still strings."""
    name: str = ""
    price: str = ""
    description: str = ""
    category: str = ""
    sizes: List[str] = field(default_factory=list)
    quantity: str = ""
    images: List[ImageUpload] = field(default_factory=list)
    existing_images: List[str] = field(default_factory=list)
    removed_images: List[str] = field(default_factory=list)


def _parse_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_int(value) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def validate_product_data(data: ProductInput) -> List[str]:
    """Return every problem with the form; an empty list means valid."""
    errors = []

    if not data.name.strip():
        errors.append('Product name is required')

    price = _parse_float(data.price)
    if price is None or not price > 0:
        errors.append('Valid price is required')

    quantity = _parse_int(data.quantity)
    if quantity is None or quantity < 0:
        errors.append('Valid quantity is required')

    if not data.description.strip():
        errors.append('Product description is required')

    if not data.category:
        errors.append('Category is required')

    if not data.sizes:
        errors.append('At least one size must be selected')

    if not data.images and not data.existing_images:
        errors.append('At least one image is required')

    for image in data.images:
        if not validate_file_type(image.content_type, ALLOWED_IMAGE_TYPES):
            errors.append(f"{image.filename}: image must be JPEG, PNG, WebP or GIF")
        size = stream_size(image.stream)
        if size is not None and not validate_file_size(size, MAX_IMAGE_SIZE_MB):
            errors.append(f"{image.filename}: image must be {MAX_IMAGE_SIZE_MB}MB or smaller")

    return errors


def image_path(product_name: str, filename: str, timestamp_ms: int = None) -> str:
    """Storage key for a product image: products/<name>_<ms>.<ext>."""
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    safe_name = re.sub(r'[^a-zA-Z0-9]', '_', product_name)
    extension = get_file_extension(filename)
    suffix = f".{extension}" if extension else ""
    return f"products/{safe_name}_{timestamp_ms}{suffix}"


def stock_status(quantity: int) -> str:
    return "In Stock" if quantity > LOW_STOCK_THRESHOLD else "Low Stock"


class ProductService:
    """
    Products live in the document store; their images in blob storage.

    A product's ``images`` field holds storage keys. Reads add
    ``image_urls``, freshly signed download URLs in the same order.
    """

    def __init__(self, store: DocumentStore, storage: BlobStorage):
        self.store = store
        self.storage = storage

    def upload_product_image(self, image: ImageUpload, product_name: str) -> str:
        """Upload one image and return its storage key."""
        path = image_path(product_name, image.filename)
        self.storage.upload_file(image.stream, path, content_type=image.content_type)
        return path

    def upload_product_images(self, images: List[ImageUpload], product_name: str) -> List[str]:
        """Upload images concurrently, keeping their order."""
        if not images:
            return []
        with ThreadPoolExecutor(max_workers=len(images)) as executor:
            return list(executor.map(
                lambda image: self.upload_product_image(image, product_name), images
            ))

    def image_url(self, image: str) -> str:
        """Download URL for a stored image; full URLs are passed through."""
        if image.startswith(('http://', 'https://')):
            return image
        return self.storage.get_file_url(image)

    def _with_image_urls(self, product: Dict) -> Dict:
        images = product.get('images') or []
        if self.storage.is_configured():
            product['image_urls'] = [self.image_url(image) for image in images]
        else:
            product['image_urls'] = [image for image in images if image.startswith(('http://', 'https://'))]
        return product

    def _fields(self, data: ProductInput, images: List[str]) -> Dict:
        return {
            'name': data.name.strip(),
            'price': _parse_float(data.price),
            'description': data.description.strip(),
            'category': data.category,
            'sizes': list(data.sizes),
            'images': images,
            'quantity': _parse_int(data.quantity),
        }

    def create_product(self, data: ProductInput) -> str:
        """
        Validate, upload images and store a new active product.

        Returns:
            The new product id

        Raises:
            ValidationError: if the form data is invalid
        """
        errors = validate_product_data(data)
        if errors:
            raise ValidationError(errors)

        image_keys = self.upload_product_images(data.images, data.name)

        now = to_iso(utc_now())
        product = self._fields(data, image_keys)
        product.update({'createdAt': now, 'updatedAt': now, 'isActive': True})

        product_id = self.store.create_document(PRODUCTS, product)
        logger.info(f"Created product {product_id} ({product['name']})")
        return product_id

    def update_product(self, product_id: str, data: ProductInput) -> None:
        """
        Update a product. Kept images are the existing ones minus the
        removed ones, followed by any new uploads.
        """
        errors = validate_product_data(data)
        if errors:
            raise ValidationError(errors)

        new_keys = self.upload_product_images(data.images, data.name)
        removed = set(data.removed_images)
        kept = [image for image in data.existing_images if image not in removed]

        updates = self._fields(data, kept + new_keys)
        updates['updatedAt'] = to_iso(utc_now())
        self.store.update_document(PRODUCTS, product_id, updates)
        logger.info(f"Updated product {product_id}")

    def get_all_products(self) -> List[Dict]:
        """Active products, newest first."""
        products = self.store.query_documents(
            PRODUCTS,
            [Condition('isActive', '==', True)],
            order_by='createdAt',
            direction='desc',
        ).documents
        return [self._with_image_urls(product) for product in products]

    def get_product_by_id(self, product_id: str) -> Optional[Dict]:
        product = self.store.get_document(PRODUCTS, product_id)
        if product is None:
            return None
        return self._with_image_urls(product)

    def get_products_by_category(self, category: str) -> List[Dict]:
        products = self.store.query_documents(
            PRODUCTS,
            [Condition('category', '==', category), Condition('isActive', '==', True)],
            order_by='createdAt',
            direction='desc',
        ).documents
        return [self._with_image_urls(product) for product in products]
