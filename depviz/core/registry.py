import logging
from typing import Any, Dict

import httpx

DEFAULT_TIMEOUT = 45.0


def package_url(registry_url: str, package_name: str) -> str:
    return f"{registry_url.rstrip('/')}/{package_name}/latest"


async def fetch_declared_dependencies(
    client: httpx.AsyncClient, package_name: str, registry_url: str
) -> Dict[str, Any]:
    """
    Looks up the latest manifest of a package and returns its declared
    dependencies (name -> version range, or whatever the registry stores).

    Never raises: any failure is logged and reported as no dependencies,
    so the caller treats the package as a leaf.
    """
    url = package_url(registry_url, package_name)
    logging.debug(f"GET {url}")

    try:
        response = await client.get(url, follow_redirects=True)

        if not response.is_success:
            logging.error(
                f"Registry error for {package_name}: {response.status_code} {response.text}"
            )
            return {}

        body = response.json()
        if not isinstance(body, dict):
            logging.error(f"Unexpected manifest for {package_name}: {type(body).__name__}")
            return {}

        dependencies = body.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            logging.error(f"Malformed dependencies field for {package_name}")
            return {}

        return dependencies

    except Exception as e:
        logging.error(f"Failed to load dependencies of package {package_name}: {e}")

    return {}
