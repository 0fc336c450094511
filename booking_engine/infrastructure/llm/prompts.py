from booking_engine.domain.entities.intent import IntentAction


def build_output_instructions() -> str:
    actions = ", ".join(f'"{action.value}"' for action in IntentAction)
    return (
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"action\": one of [" + actions + "],\n"
        "   \"response\": \"short reply to the customer, in the customer's language\",\n"
        "   \"service\": \"service id or null\",\n"
        "   \"preferred_time\": \"ISO-8601 date-time the customer asked for, or null\"}\n"
        "Rules:\n"
        "  - action and response are required.\n"
        "  - Use null for service and preferred_time when the customer did not mention them.\n"
    )


def build_system_prompt(system_context: str) -> str:
    return f"{system_context.rstrip()}\n\n{build_output_instructions()}"
