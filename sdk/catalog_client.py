# sdk/catalog_client.py
import requests
import httpx
from typing import Any, Dict, List, Optional
from rich import print


class CatalogClient:
    def __init__(self, base_url: str = "http://localhost:8080", timeout: int = 10, session: Optional[Any] = None):
        self.base_url = base_url.rstrip("/")
        # anything with a requests-style get() works here (tests pass a TestClient)
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def list_products(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {}
        if limit is not None:
            params["limit"] = str(limit)
        r = self.session.get(f"{self.base_url}/products", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        # a missing product is an answer, not a failure
        if r.status_code == 404:
            return None
        r.raise_for_status()
        return r.json()

    async def get_product_async(self, product_id: int, transport: Optional[httpx.AsyncBaseTransport] = None):
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=transport) as client:
            r = await client.get(f"/products/{product_id}")
            if r.status_code == 404:
                return None
            r.raise_for_status()
            return r.json()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Catalog API client")
    parser.add_argument("--base-url", default="http://127.0.0.1:8080", help="Catalog server URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lp = subparsers.add_parser("list-products", help="List products")
    lp.add_argument("--limit", type=int, help="Return only the first N products")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", type=int, required=True, help="ID of the product")

    args = parser.parse_args()
    c = CatalogClient(base_url=args.base_url)

    if args.command == "list-products":
        print(c.list_products(args.limit))

    elif args.command == "get-product":
        product = c.get_product(args.product_id)
        if product is None:
            print(f"[red]Product {args.product_id} not found[/red]")
        else:
            print(product)
