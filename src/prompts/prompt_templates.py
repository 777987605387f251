"""Message builders for every prompt the booking conversation sends."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from src.config import DriverConfig
from src.conversation.selection import ESCAPE_ID, Action, location_id, passenger_id
from src.prompts.system_prompts import (
    ASK_CONTACT_TEXT,
    DESTINATION_LIST_BODY,
    ESCAPE_ROW_TITLE,
    ORIGIN_LIST_BODY,
    PASSENGER_QUESTION,
)
from src.schemas.booking_schema import BookingRecord
from src.schemas.message_schema import (
    ButtonMessage,
    ButtonOption,
    ListMessage,
    ListRow,
    ListSection,
    TextMessage,
)
from src.schemas.session_schema import TripData
from src.tools.locations import LocationCategory, PricingCatalog
from src.utils import format_brl

SECTION_TITLES: dict[LocationCategory, str] = {
    LocationCategory.URBAN: "🏢 Locais Urbanos",
    LocationCategory.RURAL: "🌾 Zona Rural",
    LocationCategory.NEIGHBORING_CITY: "🏙️ Cidades Vizinhas",
}

PASSENGER_BUTTONS: list[tuple[int, str]] = [
    (1, "1 Passageiro"),
    (2, "2 Passageiros"),
    (3, "3 ou mais"),
]


def build_welcome(driver: DriverConfig) -> ButtonMessage:
    return ButtonMessage(
        body=(
            f"🚗 *Olá! Eu sou o {driver.name}!*\n"
            f"Motorista particular em *{driver.city}*.\n\n"
            "Como posso te ajudar hoje?"
        ),
        options=[
            ButtonOption(id=Action.START_QUOTE.value, title="🎯 Fazer Cotação"),
            ButtonOption(id=Action.SHOW_PRICES.value, title="💰 Ver Preços"),
            ButtonOption(id=Action.DIRECT_CONTACT.value, title="📞 Contato Direto"),
        ],
    )


def build_price_table(catalog: PricingCatalog) -> TextMessage:
    """Starting fares per category and the group surcharge."""
    labels = [
        (LocationCategory.URBAN, "Urbanos"),
        (LocationCategory.RURAL, "Rurais"),
        (LocationCategory.NEIGHBORING_CITY, "Cidades Vizinhas"),
    ]
    lines = ["💰 *TABELA DE PREÇOS (BASE)*", ""]
    for category, label in labels:
        cheapest = catalog.cheapest(category)
        if cheapest is not None:
            lines.append(f"*{label}:* a partir de {format_brl(cheapest)}")

    # Only the groups the passenger picker offers; that is what gets charged.
    surcharges = [
        (title, catalog.multiplier_for(count))
        for count, title in PASSENGER_BUTTONS
        if catalog.multiplier_for(count) > 1
    ]
    if surcharges:
        lines += ["", "*Acréscimos por Passageiros:*"]
        for title, multiplier in surcharges:
            lines.append(f"• {title}: +{round((multiplier - 1) * 100)}%")
    return TextMessage(body="\n".join(lines))


def build_direct_contact(driver: DriverConfig) -> TextMessage:
    return TextMessage(
        body=(
            "📞 *CONTATO DIRETO*\n\n"
            f"*Nome:* {driver.name}\n"
            f"*WhatsApp/Telefone:* {driver.phone}\n"
            f"*PIX:* {driver.pix}"
        )
    )


def _location_sections(
    catalog: PricingCatalog, categories: list[LocationCategory]
) -> list[ListSection]:
    sections = [
        ListSection(
            title=SECTION_TITLES[category],
            rows=[ListRow(id=location_id(name), title=name) for name in catalog.names(category)],
        )
        for category in categories
    ]
    sections.append(
        ListSection(title="📝 Outro", rows=[ListRow(id=ESCAPE_ID, title=ESCAPE_ROW_TITLE)])
    )
    return sections


def build_origin_picker(catalog: PricingCatalog, driver: DriverConfig) -> ListMessage:
    return ListMessage(
        header="Ponto de Partida",
        body=ORIGIN_LIST_BODY,
        footer=f"{driver.name} Motorista",
        button="Ver Locais",
        sections=_location_sections(catalog, [LocationCategory.URBAN, LocationCategory.RURAL]),
    )


def build_destination_picker(catalog: PricingCatalog, origin: Optional[str]) -> ListMessage:
    return ListMessage(
        header="Destino da Viagem",
        body=DESTINATION_LIST_BODY.format(origin=origin or "-"),
        button="Ver Destinos",
        sections=_location_sections(catalog, list(LocationCategory)),
    )


def build_passenger_picker() -> ButtonMessage:
    return ButtonMessage(
        body=PASSENGER_QUESTION,
        options=[ButtonOption(id=passenger_id(count), title=title) for count, title in PASSENGER_BUTTONS],
    )


def build_quote_summary(data: TripData) -> ButtonMessage:
    """Quote read-back with confirm and new-quote buttons."""
    quote = data.quote
    lines = [
        "💰 *COTAÇÃO DA VIAGEM*",
        "",
        f"📍 *Origem:* {data.origin}",
        f"🎯 *Destino:* {data.destination}",
        f"👥 *Passageiros:* {data.passenger_count}",
        "",
        f"💵 *Valor Base:* {format_brl(quote.base_fare)}",
    ]
    if quote.surcharge > 0:
        lines.append(f"➕ *Acréscimo:* {format_brl(quote.surcharge)}")
    lines += [
        f"💰 *VALOR TOTAL: {format_brl(quote.total)}*",
        f"⏱️ *Tempo Estimado:* {quote.estimated_time} minutos",
        "",
        "Tudo certo para confirmar?",
    ]
    return ButtonMessage(
        body="\n".join(lines),
        options=[
            ButtonOption(id=Action.CONFIRM_TRIP.value, title="✅ Confirmar"),
            ButtonOption(id=Action.START_QUOTE.value, title="🔄 Nova Cotação"),
        ],
    )


def build_ask_contact(name: str) -> TextMessage:
    return TextMessage(body=f"Obrigado, {name}!\n\n{ASK_CONTACT_TEXT}")


def build_booking_confirmation(record: BookingRecord, driver: DriverConfig) -> TextMessage:
    return TextMessage(
        body=(
            "✅ *VIAGEM CONFIRMADA!*\n\n"
            f"Obrigado, {record.customer.name}! Estarei no local de partida em breve.\n\n"
            "*Resumo:*\n"
            f"*De:* {record.origin}\n"
            f"*Para:* {record.destination}\n"
            f"*Valor:* {format_brl(record.total_fare)}\n\n"
            f"*Motorista:* {driver.name}\n"
            f"*Veículo:* {driver.vehicle_model} ({driver.vehicle_plate})\n"
            f"*PIX:* {driver.pix}"
        )
    )


def format_booking_time(created_at: datetime, utc_offset_hours: int) -> str:
    local = created_at.astimezone(timezone(timedelta(hours=utc_offset_hours)))
    return local.strftime("%d/%m/%Y %H:%M:%S")


def build_driver_notification(record: BookingRecord, utc_offset_hours: int) -> TextMessage:
    whatsapp = record.customer.whatsapp.split("@")[0]
    return TextMessage(
        body=(
            "🔔 *NOVA CORRIDA CONFIRMADA* 🔔\n\n"
            f"*Cliente:* {record.customer.name}\n"
            f"*Contato:* {record.customer.contact}\n"
            f"*WhatsApp:* wa.me/{whatsapp}\n\n"
            f"*Origem:* {record.origin}\n"
            f"*Destino:* {record.destination}\n"
            f"*Passageiros:* {record.passenger_count}\n"
            f"*Valor:* {format_brl(record.total_fare)}\n"
            f"*Horário:* {format_booking_time(record.created_at, utc_offset_hours)}"
        )
    )
