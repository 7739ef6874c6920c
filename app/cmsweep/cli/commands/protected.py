"""Protected command implementation.

Shows whether a ConfigMap is protected from deletion and which rule
protects it.
"""

from pathlib import Path
from typing import Annotated

import typer

from cmsweep.cli.types import load_config_or_exit
from cmsweep.models.refs import ResourceRef
from cmsweep.utils.formatting import console


def check_protected(
    name: Annotated[str, typer.Argument(help="ConfigMap name.")],
    namespace: Annotated[
        str,
        typer.Option("--namespace", "-n", help="Namespace of the ConfigMap."),
    ] = "default",
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to the cmsweep config file."),
    ] = None,
) -> None:
    """Explain the protection status of NAMESPACE/NAME.

    Examples:
        cmsweep protected kube-root-ca.crt
        cmsweep protected app-config -n kube-system
    """
    policy = load_config_or_exit(config_path).protection_policy()
    ref = ResourceRef(namespace, name)
    match = policy.explain(ref)

    if match is None:
        console.print(f"[namespace]{ref.namespace}[/]/{ref.name} is [unused]not protected[/]")
    else:
        console.print(
            f"[namespace]{ref.namespace}[/]/[protected]{ref.name}[/] is "
            f"[protected]protected[/] by {match}"
        )
