#!/usr/bin/env python3
"""
Example usage script demonstrating the Gemstone Storefront Search API.

This script shows how to:
1. Add a gemstone to the catalog
2. Search in English and Russian
3. Use fuzzy search and "did you mean" suggestions
4. Read facet counts for the filter sidebar
"""

import asyncio
import httpx
from typing import Dict, List, Optional


API_BASE_URL = "http://localhost:8000"


async def create_gemstone(data: Dict) -> Dict:
    """Create a gemstone; its search vectors are built on write."""
    async with httpx.AsyncClient() as client:
        response = await client.post(f"{API_BASE_URL}/gemstones", json=data)
        if response.status_code == 409:
            print(f"Gemstone {data['serial_number']} already exists")
            return {}
        response.raise_for_status()
        return response.json()


async def search(
    query: Optional[str],
    locale: Optional[str] = None,
    filters: Optional[Dict] = None,
    page: int = 1,
    page_size: int = 10
) -> Dict:
    """Run a search."""
    payload = {
        "query": query,
        "locale": locale,
        "filters": filters or {},
        "page": page,
        "pageSize": page_size,
    }
    async with httpx.AsyncClient() as client:
        response = await client.post(f"{API_BASE_URL}/search", json=payload)
        response.raise_for_status()
        return response.json()


async def fuzzy_suggestions(query: str, locale: Optional[str] = None) -> List[Dict]:
    """Get 'did you mean' suggestions."""
    params = {"query": query}
    if locale:
        params["locale"] = locale
    async with httpx.AsyncClient() as client:
        response = await client.get(f"{API_BASE_URL}/search/fuzzy-suggestions", params=params)
        response.raise_for_status()
        return response.json()["suggestions"]


async def filter_counts(filters: Optional[Dict] = None) -> Dict:
    async with httpx.AsyncClient() as client:
        response = await client.post(f"{API_BASE_URL}/filters/counts", json=filters or {})
        response.raise_for_status()
        return response.json()


def print_results(title: str, data: Dict):
    pagination = data["pagination"]
    print(f"\n{title}")
    print(f"  locale={data['locale']} fuzzy={data['usedFuzzySearch']} total={pagination['totalCount']}")
    for result in data["results"]:
        print(f"  - {result['serial_number']}: {result['name']} {result['color']} "
              f"({result['weight_carats']} ct) score={result['relevance_score']:.3f}")
    if data.get("message"):
        print(f"  message: {data['message']}")


async def main():
    """Main example workflow."""
    print("=" * 60)
    print("Gemstone Storefront Search - Example Usage")
    print("=" * 60)

    # Step 1: Add a gemstone
    print("\n1. Creating a gemstone...")
    gemstone = await create_gemstone({
        "serial_number": "RB-0001",
        "name": "ruby",
        "color": "red",
        "cut": "oval",
        "clarity": "VS1",
        "weight_carats": 1.25,
        "price_amount": 250000,
        "price_currency": "USD",
        "description": "Vivid pigeon blood ruby with excellent luster",
        "primary_image_url": "https://example.com/images/rb-0001.jpg",
        "origin": "Myanmar",
        "images": ["https://example.com/images/rb-0001.jpg"],
    })
    if gemstone:
        print(f"   Created {gemstone['serial_number']} (ID: {gemstone['id']})")

    # Step 2: Search in both languages
    print_results("2. English search for 'red ruby':", await search("red ruby"))
    print_results("3. Russian search for 'рубин':", await search("рубин"))

    # Step 3: Fuzzy search and suggestions
    print_results("4. Fuzzy search for 'rubby':", await search("rubby", filters={"useFuzzy": True}))
    suggestions = await fuzzy_suggestions("rubby")
    print("\n5. Did you mean:")
    for suggestion in suggestions:
        print(f"  - {suggestion['suggestion']} ({suggestion['category']}, {suggestion['similarity_score']:.2f})")

    # Step 4: Browse with filters and read facet counts
    print_results(
        "6. Browse in-stock rubies:",
        await search("", filters={"gemstoneTypes": ["ruby"], "inStockOnly": True})
    )
    counts = await filter_counts({"inStockOnly": True})
    print(f"\n7. Facet counts: {counts}")

    print("\n" + "=" * 60)
    print("Example completed!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
