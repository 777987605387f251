"""
Fixed customer-facing texts.

Everything here is static; messages that need trip data, the driver
profile or the catalog are built in prompt_templates.
"""

CANCELLATION_TEXT = "❌ Atendimento cancelado. Se precisar de algo, é só chamar!"

PROCESSING_ERROR_TEXT = (
    "⚠️ Ops, algo deu errado ao processar sua mensagem.\n\n"
    "Tente novamente ou digite *cancelar* para recomeçar."
)

ASK_ORIGIN_TEXT = "Por favor, digite o endereço de partida:"

ASK_DESTINATION_TEXT = "Por favor, digite o endereço de destino:"

ASK_NAME_TEXT = "📝 *Ótimo! Para finalizar, qual o seu nome completo?*"

ASK_CONTACT_TEXT = "📱 Por favor, informe um número de telefone para contato (com DDD)."

PASSENGER_QUESTION = "👥 Quantas pessoas vão viajar?"

EMPTY_TEXT_HINT = "Não recebi nenhum texto."

TEXT_TOO_LONG_HINT = "Sua mensagem ficou longa demais (máximo de {max_length} caracteres)."

ORIGIN_LIST_BODY = (
    "Selecione seu local de partida na lista ou escolha a opção para digitar um endereço."
)

DESTINATION_LIST_BODY = (
    "Origem: *{origin}*\n\n"
    "Selecione o destino na lista ou escolha a opção para digitar."
)

ESCAPE_ROW_TITLE = "✏️ Outro endereço"
