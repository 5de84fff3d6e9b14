"""
Client capability advertisement.

Tells an agent which component catalogs this client can render, either by
id or by sending the full catalog document inline.
"""

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, Field, PrivateAttr

from ..core.config import get_settings
from ..core.id import new_inline_catalog_id


class CatalogCapabilityError(RuntimeError):
    """Capabilities cannot be built under the requested inlining policy."""

    pass


class InlineCatalogHandling(str, Enum):
    """How catalogs are advertised to the agent."""

    NONE = "none"  # ids only; a catalog without an id is an error
    MISSING_IDS = "missingIds"  # inline only the catalogs without an id
    ALL = "all"  # inline everything


class Catalog(BaseModel):
    """A set of component schemas (and optionally functions) a client supports."""

    catalog_id: str | None = None
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)
    functions: list[dict[str, Any]] | None = None

    _inline_id: str | None = PrivateAttr(default=None)

    @property
    def effective_id(self) -> str:
        """catalog_id, or a generated inline id that is stable for this instance."""
        if self.catalog_id is not None:
            return self.catalog_id
        if self._inline_id is None:
            self._inline_id = new_inline_catalog_id()
        return self._inline_id

    def to_capabilities_json(self) -> dict[str, Any]:
        """Full catalog document for inline advertisement."""
        document: dict[str, Any] = {
            "catalogId": self.effective_id,
            "components": self.components,
        }
        if self.functions:
            document["functions"] = self.functions
        return document


class ClientCapabilities(BaseModel):
    """The versioned capabilities envelope sent with client messages."""

    version: str = "v0.9"
    supported_catalog_ids: list[str] = Field(default_factory=list)
    inline_catalogs: list[dict[str, Any]] | None = None

    @classmethod
    def from_catalogs(
        cls,
        catalogs: Iterable[Catalog],
        inline_handling: InlineCatalogHandling | str | None = None,
    ) -> "ClientCapabilities":
        """
        Build capabilities from catalogs.

        Args:
            catalogs: Catalogs the client can render
            inline_handling: Inlining policy; defaults to the
                inline_catalog_handling setting

        Returns:
            Capabilities with ids and/or inline documents

        Raises:
            CatalogCapabilityError: If the policy is NONE and a catalog has no id
        """
        if inline_handling is None:
            inline_handling = get_settings().inline_catalog_handling
        handling = InlineCatalogHandling(inline_handling)
        supported_ids: list[str] = []
        inline: list[dict[str, Any]] = []

        for catalog in catalogs:
            if handling is InlineCatalogHandling.ALL:
                inline.append(catalog.to_capabilities_json())
                continue

            if catalog.catalog_id is not None:
                supported_ids.append(catalog.catalog_id)
            elif handling is InlineCatalogHandling.NONE:
                raise CatalogCapabilityError(
                    "Catalog provided without a catalog_id, but inline handling is 'none'"
                )
            else:
                inline.append(catalog.to_capabilities_json())

        return cls(supported_catalog_ids=supported_ids, inline_catalogs=inline or None)

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {"supportedCatalogIds": list(self.supported_catalog_ids)}
        if self.inline_catalogs is not None:
            body["inlineCatalogs"] = list(self.inline_catalogs)
        return {self.version: body}
