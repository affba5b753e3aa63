"""
Deployment-metadata credential discovery.

Cloud Foundry style platforms hand bound service credentials to the
application through the ``VCAP_SERVICES`` environment variable, a JSON
object keyed by service label:

    {
      "text_to_speech": [
        {"name": "my-tts", "plan": "lite",
         "credentials": {"url": "...", "apikey": "...", "iam_apikey_name": "..."}}
      ]
    }

The lookup is best-effort: a missing variable, invalid JSON or an unknown
service all produce an empty dict, never an exception.
"""
from __future__ import annotations

import json
import os
from typing import Any, Callable, Dict, Mapping, Optional

from tts_cloud.core.logging import debug, get_logger, warn

_LOG = get_logger("tts-cloud.deployment")

DeploymentLookup = Callable[[str], Mapping[str, Any]]


def _load_services(environ: Mapping[str, str]) -> Dict[str, Any]:
    raw = environ.get("VCAP_SERVICES")
    if not raw:
        return {}
    try:
        services = json.loads(raw)
    except ValueError:
        warn(_LOG, "vcap_services_invalid_json")
        return {}
    return services if isinstance(services, dict) else {}


def vcap_credentials(name: str, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Return the credentials of the first bound instance of ``name``.

    Matching order:
        1. A service label equal to ``name``
        2. A service label starting with ``name``
        3. Any instance whose own ``name`` equals ``name``

    Returns:
        A fresh dict of credentials, or ``{}`` when nothing matches.
    """
    services = _load_services(os.environ if environ is None else environ)
    if not services:
        return {}

    candidates = []
    if name in services:
        candidates.append(services[name])
    candidates.extend(v for label, v in services.items() if label != name and label.startswith(name))

    for instances in candidates:
        if isinstance(instances, list) and instances:
            creds = instances[0].get("credentials") if isinstance(instances[0], dict) else None
            if isinstance(creds, dict):
                debug(_LOG, "vcap_match", service=name, instance=instances[0].get("name"))
                return dict(creds)

    for instances in services.values():
        for instance in instances if isinstance(instances, list) else []:
            if isinstance(instance, dict) and instance.get("name") == name:
                creds = instance.get("credentials")
                if isinstance(creds, dict):
                    debug(_LOG, "vcap_match", service=name, instance=name)
                    return dict(creds)

    return {}


def environ_deployment_lookup(environ: Optional[Mapping[str, str]] = None) -> DeploymentLookup:
    """Bind ``vcap_credentials`` to one environment mapping."""
    def lookup(name: str) -> Mapping[str, Any]:
        return vcap_credentials(name, environ)
    return lookup
