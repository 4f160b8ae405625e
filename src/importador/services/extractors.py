from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Protocol

from lxml import etree

from importador.config import BRT
from importador.models.record import CanonicalRecord, DocumentKind, TransactionType
from importador.utils.validators import is_valid_state, parse_amount

logger = logging.getLogger(__name__)

CTE_DESCRIPTION_MAX = 50
NFSE_DESCRIPTION_MAX = 100
NO_NUMBER = "SEM NUMERO"
UNCATEGORIZED = "Uncategorized"

_FREIGHT_REF_RE = re.compile(r"Ref:\s*([A-Z0-9]+)")

_FUEL_WORDS = ("diesel", "gasolina", "etanol", "arla")
_MAINTENANCE_WORDS = ("manutencao", "manutenção", "revisao", "pneu", "servico")
_TOLL_WORDS = ("pedagio", "pedágio")
_TRANSPORT_WORDS = ("frete", "transporte")


class Extractor(Protocol):
    """One candidate schema. ``extract`` returns None when the document does not match."""

    name: str

    def extract(self, root: etree._Element) -> CanonicalRecord | None: ...


# --- Tag lookup (namespace-agnostic) ---


def _find(root: etree._Element, tag: str) -> etree._Element | None:
    """First element named *tag* anywhere in the document, root included."""
    return next(root.iter(f"{{*}}{tag}"), None)


def _find_below(parent: etree._Element | None, tag: str) -> etree._Element | None:
    """First descendant of *parent* named *tag*."""
    if parent is None:
        return None
    return next(parent.iterdescendants(f"{{*}}{tag}"), None)


def _text_of(el: etree._Element | None) -> str:
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def _text_below(parent: etree._Element | None, tag: str) -> str:
    return _text_of(_find_below(parent, tag))


def _state(text: str) -> str:
    """UF code in upper case, or "" when it is not one of the 27 (e.g. EX for abroad)."""
    uf = text.upper()
    if uf and not is_valid_state(uf):
        logger.debug("Discarding unknown UF code %r", text)
        return ""
    return uf


def _date_part(timestamp: str) -> str:
    """Keep the date of an ISO timestamp; today (BRT) when absent."""
    if timestamp:
        return timestamp.split("T")[0]
    return datetime.now(BRT).date().isoformat()


def categorize(description: str, cfop: str = "") -> str:
    """Guess a ledger category from the CFOP prefix and description keywords."""
    d = description.lower()
    if cfop:
        if cfop.startswith(("535", "635")):
            return "Transport Revenue"
        if cfop.startswith(("510", "610")):
            return "Sales Revenue"
        if cfop.startswith(("1556", "2556")):
            if "diesel" in d or "gasolina" in d:
                return "Fuel"
            if "pneu" in d or "peca" in d:
                return "Maintenance"
    if any(w in d for w in _FUEL_WORDS):
        return "Fuel"
    if any(w in d for w in _MAINTENANCE_WORDS):
        return "Maintenance"
    if any(w in d for w in _TOLL_WORDS):
        return "Tolls"
    if any(w in d for w in _TRANSPORT_WORDS):
        return "Transport Revenue"
    return UNCATEGORIZED


class CteExtractor:
    """CT-e (freight bill of lading). Fields are read only inside ``infCte``."""

    name = "CT-e"

    def extract(self, root: etree._Element) -> CanonicalRecord | None:
        inf = _find(root, "infCte")
        if inf is None:
            logger.debug("No infCte element, not a CT-e")
            return None

        value = parse_amount(_text_below(inf, "vTPrest"))
        if value <= 0:
            # Zero-valued CT-e falls through to the next candidate
            logger.debug("CT-e without positive vTPrest (%s), skipping", value)
            return None

        access_key = self._access_key(root, inf)
        number = _text_below(inf, "nCT") or (access_key[25:34] if access_key else NO_NUMBER)
        uf_ini = _text_below(inf, "UFIni")
        uf_fim = _text_below(inf, "UFFim")
        origin = _state(uf_ini)
        destination = _state(uf_fim)
        cfop = _text_below(inf, "CFOP")
        obs = _text_below(inf, "xObs")

        if obs:
            description = obs[:CTE_DESCRIPTION_MAX]
        else:
            description = f"Frete CT-e {number} ({uf_ini} -> {uf_fim})"

        category = categorize(description, cfop)
        if category == UNCATEGORIZED:
            category = "Transport Revenue"

        freight_id = ""
        match = _FREIGHT_REF_RE.search(obs)
        if match:
            freight_id = match.group(1)

        emit = _find_below(inf, "emit")
        dest = _find_below(inf, "dest")

        logger.debug("Matched CT-e %s (%s -> %s)", number, origin, destination)
        return CanonicalRecord(
            type=TransactionType.REVENUE,
            date=_date_part(_text_below(inf, "dhEmi")),
            value=value,
            document_number=number,
            origin=origin,
            destination=destination,
            description=description,
            source=DocumentKind.CTE,
            cfop=cfop,
            category=category,
            access_key=access_key,
            provider_cnpj=_text_below(emit, "CNPJ"),
            provider_name=_text_below(emit, "xNome") or "Emitente Desconhecido",
            recipient_cnpj=_text_below(dest, "CNPJ") or _text_below(dest, "CPF"),
            taker_name=_text_below(dest, "xNome") or "Destinatário Desconhecido",
            freight_id=freight_id,
        )

    @staticmethod
    def _access_key(root: etree._Element, inf: etree._Element) -> str:
        """Access key from ``infCte@Id``, else from ``protCTe/chCTe``."""
        id_attr = inf.get("Id")
        if id_attr is not None:
            return id_attr.replace("CTe", "")
        return _text_below(_find(root, "protCTe"), "chCTe")


class NfseExtractor:
    """NFS-e (municipal service invoice). Layouts vary, so tags are looked up document-wide."""

    name = "NFS-e"

    def extract(self, root: etree._Element) -> CanonicalRecord | None:
        valor = _find(root, "ValorServicos")
        if valor is None:
            logger.debug("No ValorServicos element, not an NFS-e")
            return None

        value = parse_amount(_text_of(valor))
        if value <= 0:
            logger.debug("NFS-e without positive ValorServicos (%s), skipping", value)
            return None

        number = _text_of(_find(root, "Numero")) or NO_NUMBER
        discriminacao = _text_of(_find(root, "Discriminacao"))
        if discriminacao:
            description = discriminacao[:NFSE_DESCRIPTION_MAX]
        else:
            description = f"Serviço NFS-e {number}"

        taker = _find(root, "Tomador")
        if taker is None:
            taker = _find(root, "TomadorServico")
        provider = _find(root, "Prestador")
        if provider is None:
            provider = _find(root, "PrestadorServico")

        logger.debug("Matched NFS-e %s", number)
        return CanonicalRecord(
            type=TransactionType.REVENUE,
            date=_date_part(_text_of(_find(root, "DataEmissao"))),
            value=value,
            document_number=number,
            origin="",
            destination="",
            description=description,
            source=DocumentKind.NFSE,
            category=categorize(discriminacao),
            provider_cnpj=_text_below(_find_below(provider, "CpfCnpj"), "Cnpj"),
            provider_name=_text_below(provider, "RazaoSocial") or "Prestador Desconhecido",
            recipient_cnpj=_text_below(_find_below(taker, "CpfCnpj"), "Cnpj"),
            taker_name=_text_below(taker, "RazaoSocial") or "Tomador Desconhecido",
        )


EXTRACTORS: tuple[Extractor, ...] = (CteExtractor(), NfseExtractor())
