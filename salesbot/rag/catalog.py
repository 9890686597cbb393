"""Product catalog records and their indexed representation."""
import base64
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field
import structlog

logger = structlog.get_logger()


class Listing(BaseModel):
    """One laptop in the catalog.

    Unknown fields are kept so they travel into the index metadata.
    """

    model_config = ConfigDict(extra="allow")

    name_ar: str
    name_en: str
    price: float
    quantity: int = 0
    in_stock: Union[bool, int] = Field(default=True)
    additional_features: str = ""

    def metadata(self) -> Dict[str, Any]:
        """Metadata stored next to the vector."""
        return self.model_dump()


def load_catalog(path: Path) -> List[Listing]:
    """Load catalog listings from a JSON array file.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        pydantic.ValidationError: If a record is malformed
    """
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)

    listings = [Listing.model_validate(record) for record in records]
    logger.info("catalog_loaded", path=str(path), listings=len(listings))
    return listings


def listing_id(listing: Listing) -> str:
    """Stable ASCII id derived from the Arabic name.

    Same listing, same id, so reseeding overwrites instead of duplicating.
    """
    encoded = base64.urlsafe_b64encode(listing.name_ar.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def render_listing(listing: Listing) -> str:
    """Primary text that gets embedded and handed to the model."""
    return (
        f"Name (AR): {listing.name_ar}\n"
        f"Name (EN): {listing.name_en}\n"
        f"Price: {_format_price(listing.price)}\n"
        f"In Stock: {listing.in_stock}\n"
        f"Additional Features: {listing.additional_features}"
    )


def _format_price(price: float) -> str:
    return str(int(price)) if float(price).is_integer() else str(price)
