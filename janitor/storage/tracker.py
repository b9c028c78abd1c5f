"""Resource tracker storage.

Stores tracked resources and their opt-in/opt-out state in YAML format.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from janitor.models.resource import CleanupState, Resource, ResourceType

logger = logging.getLogger(__name__)


class ResourceTracker:
    """Durable store of tracked resources keyed by (resource id, region).

    Resources are stored in one YAML file per region. Every write rewrites the
    region file; no locking is done, so concurrent writers to the same region
    follow last-writer-wins.

    Storage structure:
        ~/.janitor/resources/
            us-east-1.yaml
            eu-west-1.yaml

    Attributes:
        storage_dir: Directory holding the region files
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize resource tracker.

        Args:
            storage_dir: Directory for region files (default: ~/.janitor/resources)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".janitor" / "resources")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def get_resource(self, resource_id: str, region: str) -> Optional[Resource]:
        """Look up a tracked resource.

        Args:
            resource_id: Resource identifier
            region: AWS region of the resource

        Returns:
            The resource if tracked, None otherwise
        """
        return self._load_region(region).get(resource_id)

    def add_or_update(self, resource: Resource) -> None:
        """Insert or replace a tracked resource."""
        resources = self._load_region(resource.region)
        resources[resource.id] = resource
        self._save_region(resource.region, resources)
        logger.debug(f"Saved {resource.resource_type.value} resource {resource.id} in {resource.region}")

    def get_resources(
        self,
        resource_type: Optional[ResourceType] = None,
        state: Optional[CleanupState] = None,
        region: Optional[str] = None,
    ) -> List[Resource]:
        """Query tracked resources.

        Args:
            resource_type: Filter by resource type (optional)
            state: Filter by cleanup state (optional)
            region: Filter by region (optional, default all regions)

        Returns:
            Matching resources ordered by region then id
        """
        regions = [region] if region else self.regions()
        results = []

        for reg in regions:
            for resource in self._load_region(reg).values():
                if resource_type is not None and resource.resource_type != resource_type:
                    continue
                if state is not None and resource.state != state:
                    continue
                results.append(resource)

        return results

    def regions(self) -> List[str]:
        return sorted(path.stem for path in self.storage_dir.glob("*.yaml"))

    def _region_file(self, region: str) -> Path:
        return self.storage_dir / f"{region}.yaml"

    def _load_region(self, region: str) -> Dict[str, Resource]:
        region_file = self._region_file(region)
        if not region_file.exists():
            return {}

        with open(region_file, "r") as f:
            data = yaml.safe_load(f) or {}

        resources = {}
        for item in data.get("resources", []):
            resource = Resource.from_dict(item)
            resources[resource.id] = resource
        return resources

    def _save_region(self, region: str, resources: Dict[str, Resource]) -> None:
        data = {
            "metadata": {
                "version": "1.0",
                "region": region,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            "resources": [resources[key].to_dict() for key in sorted(resources)],
        }

        with open(self._region_file(region), "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
