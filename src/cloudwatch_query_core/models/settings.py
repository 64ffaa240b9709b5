"""
DatasourceSettings model holding the read-only datasource configuration.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DatasourceSettings:
    """
    Configuration of a CloudWatch datasource instance.

    Attributes:
        id: Numeric datasource id forwarded with every query.
        default_region: Region used for queries whose region is "default".
        url: Optional proxy URL of the datasource.
        name: Optional display name.
        custom_metrics_namespaces: Comma-separated custom namespaces.
    """

    id: int
    default_region: str
    url: Optional[str] = None
    name: Optional[str] = None
    custom_metrics_namespaces: str = ""

    def to_dict(self) -> dict:
        """
        Convert to the platform's instance settings shape.

        Returns:
            Dictionary with id, url, name and jsonData.
        """
        return {
            "id": self.id,
            "url": self.url,
            "name": self.name,
            "jsonData": {
                "defaultRegion": self.default_region,
                "customMetricsNamespaces": self.custom_metrics_namespaces
            }
        }

    @classmethod
    def from_instance_settings(cls, data: dict) -> "DatasourceSettings":
        """
        Create DatasourceSettings from the platform's instance settings.

        Format: {"id": 1, "url": "...", "name": "...",
        "jsonData": {"defaultRegion": "us-east-1", "customMetricsNamespaces": "..."}}

        Args:
            data: Instance settings dictionary.

        Returns:
            DatasourceSettings instance.

        Raises:
            ValueError: If the id or default region is missing.
        """
        json_data = data.get("jsonData") or {}
        if data.get("id") is None:
            raise ValueError("Datasource settings must include an 'id'")
        default_region = json_data.get("defaultRegion")
        if not default_region:
            raise ValueError("Datasource settings must include jsonData.defaultRegion")

        return cls(
            id=int(data["id"]),
            default_region=default_region,
            url=data.get("url"),
            name=data.get("name"),
            custom_metrics_namespaces=json_data.get("customMetricsNamespaces") or "",
        )
