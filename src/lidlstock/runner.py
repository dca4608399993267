from __future__ import annotations

import logging
import re
from typing import Callable

from rich.console import Console
from rich.markup import escape

from lidlstock.adapters import PlaywrightPageRenderer, RenderError
from lidlstock.display import observation_line, store_table
from lidlstock.models import AppConfig, ProductReference, Store, Variant
from lidlstock.stock import StockAvailabilityClient, StockQueryError, StockReport
from lidlstock.stores import StoreDirectory, filter_by_postal_code
from lidlstock.variants import ProductVariantResolver

LOG = logging.getLogger(__name__)

POSTAL_CODE_PATTERN = re.compile(r"^\d{4}$")
POSTAL_CODE_PROMPT = "Filter by postcode (press Enter to skip): "

Ask = Callable[[str], str]


def is_valid_postal_code(value: str) -> bool:
    return not value or POSTAL_CODE_PATTERN.match(value) is not None


class LookupService:
    def __init__(
        self,
        directory: StoreDirectory,
        resolver: ProductVariantResolver,
        stock_client: StockAvailabilityClient,
        console: Console | None = None,
        ask: Ask | None = None,
    ) -> None:
        self.directory = directory
        self.resolver = resolver
        self.stock_client = stock_client
        self.console = console or Console()
        self.ask = ask or self.console.input

    def prompt_postal_code(self) -> str:
        value = self.ask(POSTAL_CODE_PROMPT).strip()
        while not is_valid_postal_code(value):
            self.console.print("[red]Invalid postcode format.[/] Please enter a 4-digit postcode.")
            value = self.ask(POSTAL_CODE_PROMPT).strip()
        return value

    def choose_variant(self, product: ProductReference, choice: str | None = None) -> Variant | None:
        if not product.variants:
            self.console.print(f"No variants found, checking base product {product.product_id}.")
            return product.purchasable_variants()[0]

        self.console.print(f"\nFound {len(product.variants)} variants for this product.")
        for index, variant in enumerate(product.variants, start=1):
            self.console.print(
                f"{index}. {escape(variant.display_title)} (ID: {variant.variant_id})"
            )

        if choice is None:
            choice = self.ask("\nChoose a variant number: ")
        try:
            index = int(choice.strip())
        except ValueError:
            index = 0
        if not 1 <= index <= len(product.variants):
            self.console.print("[red]Invalid selection.[/]")
            return None
        return product.variants[index - 1]

    def check_product(
        self,
        url: str | None = None,
        variant_choice: str | None = None,
        postal_code: str | None = None,
    ) -> StockReport | None:
        if url is None:
            url = self.ask("Enter Lidl product URL: ").strip()

        try:
            product = self.resolver.resolve(url)
        except RenderError as exc:
            LOG.error("%s", exc)
            product = None
        if product is None:
            self.console.print("[red]Failed to fetch product data.[/] Please check the URL.")
            return None

        self.console.print(f"\nSearching for product: [bold]{escape(product.title)}[/]")
        variant = self.choose_variant(product, variant_choice)
        if variant is None:
            return None

        stores = self.directory.load_or_refresh()

        if postal_code is None:
            postal_code = self.prompt_postal_code()
        if postal_code:
            stores = filter_by_postal_code(stores, postal_code)
            if not stores:
                self.console.print(f"[red]No stores found for postcode {postal_code}.[/]")
                return None
        if not stores:
            self.console.print("[red]No stores available to check.[/] Refresh the store list first.")
            return None

        return self.check_stock(variant.variant_id or product.product_id, stores)

    def check_stock(self, product_id: str, stores: list[Store]) -> StockReport | None:
        self.console.print("\nChecking stock across stores...")
        try:
            report = self.stock_client.query(product_id, stores)
        except StockQueryError as exc:
            LOG.error("%s", exc)
            self.console.print("[red]No stock data found for the given product.[/]")
            return None

        if not report.has_data:
            self.console.print("[red]No stock data found for the given product.[/]")
            return report

        for observation in report.observations:
            self.console.print(observation_line(observation))
        self.console.print(f"\nFound {len(report.in_stock)} stores with stock.")
        return report

    def list_stores(self) -> None:
        stores = self.directory.load()
        if not stores:
            self.console.print("[red]No cached store data found.[/]")
            return
        self.console.print(f"\nTotal stores: {len(stores)}\n")
        self.console.print(store_table(stores))

    def refresh_and_list_stores(self) -> None:
        self.directory.refresh()
        self.list_stores()

    def run_menu(self) -> None:
        while True:
            self.console.print("\nWelcome to LIDL Product Stock CLI!")
            self.console.print("1. Check product availability")
            self.console.print("2. Update and list LIDL stores")
            self.console.print("3. Exit\n")

            choice = self.ask("Select an option: ").strip()
            if choice == "1":
                self.check_product()
            elif choice == "2":
                self.refresh_and_list_stores()
            else:
                self.console.print("Bye!")
                return


def build_service(
    config: AppConfig,
    headless: bool | None = None,
    console: Console | None = None,
) -> LookupService:
    headless_mode = config.headless if headless is None else headless
    directory = StoreDirectory(
        cache_path=config.store_cache,
        maps_host=config.maps_host,
        api_key=config.maps_api_key,
        timeout_seconds=config.timeout_seconds,
    )
    resolver = ProductVariantResolver(lambda: PlaywrightPageRenderer(headless=headless_mode))
    stock_client = StockAvailabilityClient(config.stock_api, timeout_seconds=config.timeout_seconds)
    return LookupService(directory, resolver, stock_client, console=console)
