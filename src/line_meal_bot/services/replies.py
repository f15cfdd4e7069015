"""LINE reply message builders."""

from line_meal_bot.domain.nutrition import ResolutionResult

HELP_TEXT = (
    "Hi there!\n\n"
    "Send a photo of your meal or tell me what you ate.\n"
    'Send your weight as a number, like "65kg".\n\n'
    "Feel free to ask me anything!"
)

APOLOGY_TEXT = (
    "Sorry, something went wrong while handling your message.\n"
    "Please try again in a moment."
)

IMAGE_FETCH_FAILED_TEXT = "Sorry, I couldn't fetch that image. Please send it again."

WELCOME_TEXT = (
    "Welcome! I analyze your meal photos and calculate calories and "
    "nutrients for you.\n\nLet's start with a quick setup."
)


def text_message(text: str) -> dict[str, object]:
    """Build a plain text message."""
    return {"type": "text", "text": text}


def _counseling_buttons(alt_text: str, text: str, url: str) -> dict[str, object]:
    return {
        "type": "template",
        "altText": alt_text,
        "template": {
            "type": "buttons",
            "text": text,
            "actions": [{"type": "uri", "label": "Start counseling", "uri": url}],
        },
    }


def counseling_prompt(action_name: str, counseling_url: str) -> dict[str, object]:
    """Build the prompt sent when counseling is not finished."""
    return _counseling_buttons(
        f"Setup is required to use {action_name}",
        (
            f"To use {action_name}, please finish the initial setup "
            "(counseling) first. Tell me a little about yourself!"
        ),
        counseling_url,
    )


def welcome_message(counseling_url: str) -> dict[str, object]:
    """Build the first-contact welcome message."""
    return _counseling_buttons("Welcome!", WELCOME_TEXT, counseling_url)


def meal_recorded(result: ResolutionResult) -> dict[str, object]:
    """Summarize a recorded meal."""
    totals = result.totals
    return text_message(
        "Meal recorded!\n\n"
        f"{result.description}\n"
        f"Calories: {totals.calories} kcal\n"
        f"Protein: {totals.protein:.1f} g\n"
        f"Carbs: {totals.carbs:.1f} g\n"
        f"Fat: {totals.fat:.1f} g\n\n"
        "All done, nice work!"
    )


def weight_recorded(weight: float) -> dict[str, object]:
    """Confirm a recorded weight."""
    return text_message(f"Weight recorded!\n\n{weight:g} kg\n\nGreat job today!")


def quota_exceeded(label: str, limit: int) -> dict[str, object]:
    """Tell the user today's ceiling has been reached."""
    return text_message(
        f"You've reached today's {label} limit ({limit}).\n"
        "It resets at midnight."
    )
