"""Barcode product lookup.

``UPCItemDBClient`` talks to the barcode provider. ``BarcodeLookup``
tries every configured barcode client and, when none knows the code,
falls back to resolving the code as a food name through the nutrition
resolver (lower confidence).
"""

import logging

from services.errors import ProviderUnavailable
from utils.http import fetch_json, guard_payload

logger = logging.getLogger(__name__)


class UPCItemDBClient:
    name = 'upcitemdb'

    def __init__(self, base_url, api_key, timeout=10):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    @property
    def is_configured(self):
        return bool(self.api_key)

    @guard_payload
    def lookup(self, barcode):
        data = fetch_json(
            self.name, self.base_url,
            params={'upc': barcode},
            headers={'user_key': self.api_key, 'key_type': '3scale'},
            timeout=self.timeout,
        )
        items = data.get('items') if isinstance(data, dict) else None
        return dict(items[0]) if items else None


def parse_product(barcode, source, confidence, product):
    """Flatten provider product fields into one shape."""
    images = product.get('images') or []
    nutrition = product.get('nutrition')
    return {
        'barcode': product.get('upc') or product.get('ean') or product.get('barcode') or barcode,
        'name': product.get('title') or product.get('name') or product.get('product_name'),
        'description': product.get('description') or product.get('summary'),
        'category': product.get('category') or product.get('category_name'),
        'brand': product.get('brand') or product.get('manufacturer'),
        'image': images[0] if images else product.get('image'),
        'nutrition': nutrition.to_dict() if hasattr(nutrition, 'to_dict') else nutrition,
        'confidence': confidence,
        'source': source,
    }


class BarcodeLookup:
    def __init__(self, clients, resolver):
        self.clients = list(clients)
        self.resolver = resolver

    def lookup(self, barcode):
        """All matches for *barcode*, best first. Empty when nothing matched."""
        barcode = (barcode or '').strip()
        if not barcode:
            return []

        results = []
        for client in self.clients:
            if not client.is_configured:
                continue
            try:
                product = client.lookup(barcode)
            except ProviderUnavailable as e:
                logger.warning("Barcode lookup via %s failed: %s", client.name, e.reason)
                continue
            if product:
                results.append(parse_product(barcode, client.name, 'high', product))

        if not results:
            nutrition = self.resolver.resolve(barcode)
            if nutrition is not None:
                results.append(parse_product(barcode, 'nutrition_api_fallback', 'medium', {
                    'title': nutrition.name,
                    'description': f"Nutrition data for {nutrition.name}",
                    'category': nutrition.category,
                    'nutrition': nutrition,
                }))
        return results
