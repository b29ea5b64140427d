"""
Entity Normalization Transformer

Normalizes owner names, corporate names, business addresses and parcel ids
so that the same real-world entity produces the same key across data sources.
"""
import re
from typing import Iterable, Optional

from src.portfolio_engine.utils.logger import get_logger

logger = get_logger(__name__)


class EntityNormalizer:
    """
    Normalizes raw registry and assessor strings into comparable values.

    All values are uppercased and trimmed; no fuzzy matching is applied.
    """

    WHITESPACE_RE = re.compile(r"\s+")

    def normalize_text(self, value: Optional[str]) -> str:
        """Uppercase and trim a free-text value."""
        if not value:
            return ""
        return str(value).strip().upper()

    def join_parts(self, parts: Iterable[Optional[str]]) -> str:
        """
        Join non-empty parts with single spaces and normalize the result.

        Args:
            parts: Raw string fragments (None and blanks are skipped)

        Returns:
            Uppercase joined string
        """
        cleaned = [str(p).strip() for p in parts if p is not None and str(p).strip()]
        return self.normalize_text(" ".join(cleaned))

    def normalize_person_name(self, first_name: Optional[str], last_name: Optional[str]) -> str:
        """Build an individual name as 'FIRST LAST'."""
        return self.join_parts([first_name, last_name])

    def normalize_corporate_name(self, corporate_name: Optional[str]) -> str:
        return self.normalize_text(corporate_name)

    def normalize_owner_name(self, owner_name: Optional[str]) -> str:
        return self.normalize_text(owner_name)

    def normalize_business_address(
        self,
        house_number: Optional[str],
        street_name: Optional[str],
        city: Optional[str],
        state: Optional[str],
    ) -> str:
        """
        Build a business mailing address from its registry components.

        Args:
            house_number: Business house number
            street_name: Business street name
            city: Business city
            state: Business state

        Returns:
            Uppercase address, e.g. "123 BROADWAY NEW YORK NY"
        """
        return self.join_parts([house_number, street_name, city, state])

    def collapse_address(self, address: Optional[str]) -> str:
        """
        Canonical form of an address used for entity matching.

        Collapses whitespace runs and removes commas.
        """
        if not address:
            return ""
        collapsed = self.WHITESPACE_RE.sub(" ", address).replace(",", "")
        return collapsed.strip()

    def build_bbl(
        self,
        bbl: Optional[str],
        boro_code: Optional[str],
        block: Optional[str],
        lot: Optional[str],
    ) -> Optional[str]:
        """
        Resolve the borough-block-lot parcel id.

        Uses the upstream BBL when present (dropping any decimal suffix),
        otherwise composes boro + 5-digit block + 4-digit lot.

        Returns:
            10-digit BBL string, or None when it cannot be determined
        """
        if bbl:
            value = str(bbl).strip().split(".")[0]
            if value:
                return value

        if not boro_code or not block or not lot:
            logger.debug("bbl_unresolvable", boro_code=boro_code, block=block, lot=lot)
            return None

        return f"{str(boro_code).strip()}{str(block).strip().zfill(5)}{str(lot).strip().zfill(4)}"
