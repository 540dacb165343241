from __future__ import annotations

from ..build_config import ImageConfig

_MOTD_LOGO = (
    "   __        .                   .",
    " _|  |_      | .-. .  . .-. :--. |-",
    "|_    _|     ;|   ||  |(.-' |  | |",
    "  |__|   `--'  `-' `;-| `-' '  ' `-'",
)


def render_motd(image: ImageConfig) -> str:
    lines = list(_MOTD_LOGO)
    lines.append(f"                   /  ;  Instance ({image.display_name} {image.build_date})")
    lines.append(f"                   `-'   {image.docs_url}")
    return "\n".join(lines) + "\n\n"


def render_product(image: ImageConfig) -> str:
    return (
        "Name: Joyent Instance\n"
        f"Image: {image.display_name} {image.build_date}\n"
        f"Documentation: {image.docs_url}\n"
        f"Description: {image.description}\n"
    )
