# Data Fair MCP Server
# File: tools/prompts.py
# Version: v1

"""Canned French prompts guiding a model through a catalog lookup.

They only render text; no request is made to Data Fair.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

NOT_FOUND = "Aucune information trouvée"


def company_headquarters_prompt(company_name: str) -> str:
    return (
        f"Cherche le siège social de l'entreprise {company_name}\n"
        "Pour cela :\n"
        "1. Cherche spécifiquement les jeux de données relatifs aux sièges sociaux d'entreprises\n"
        f"2. Cherche les informations de l'entreprise {company_name} dans le jeu de données le plus pertinent.\n"
        "3. Retourne le siège social sous forme de texte, en indiquant aussi le nom du jeu de données "
        "et l'URL du jeu de données utilisé pour trouver l'information.\n\n"
        f'Si tu ne trouves pas d\'information, retourne "{NOT_FOUND}".'
    )


def gendarmerie_address_prompt(gendarmerie_name: str) -> str:
    return (
        f"Cherche l'adresse de la gendarmerie {gendarmerie_name}\n"
        "Pour cela :\n"
        "1. Cherche spécifiquement les jeux de données relatifs aux adresses de gendarmeries\n"
        f"2. Cherche les informations de la gendarmerie {gendarmerie_name} dans le jeu de données le plus pertinent.\n"
        "3. Retourne l'adresse sous forme de texte, en indiquant aussi le nom du jeu de données "
        "et l'URL du jeu de données utilisé pour trouver l'information.\n\n"
        f'Si tu ne trouves pas d\'information, retourne "{NOT_FOUND}".'
    )


def register_prompts(server: Any) -> None:
    """Register the prompt templates on a FastMCP server."""

    @server.prompt(
        name="search_company_headquarters",
        title="Cherche le siège social d'une entreprise",
        description="Cette invite permet de trouver le siège social d'une entreprise à partir de son nom",
    )
    def search_company_headquarters(
        companyName: Annotated[  # noqa: N803
            str,
            Field(description="Le nom de l'entreprise pour laquelle vous souhaitez trouver le siège social"),
        ],
    ) -> str:
        return company_headquarters_prompt(companyName)

    @server.prompt(
        name="search_address_gendarmerie",
        title="Cherche l'adresse d'une gendarmerie",
        description="Cette invite permet de trouver l'adresse d'une gendarmerie à partir de son nom",
    )
    def search_address_gendarmerie(
        gendarmerieName: Annotated[  # noqa: N803
            str,
            Field(
                description="Le nom de la gendarmerie / la brigade pour laquelle vous souhaitez trouver l'adresse"
            ),
        ],
    ) -> str:
        return gendarmerie_address_prompt(gendarmerieName)
