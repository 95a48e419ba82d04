"""
Recipe generation prompts.

The schema block is the contract the response extractor relies on: the
model is asked for one bare JSON object with exactly these keys.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PromptTemplate:
    """Locale-specific pieces of the system prompt."""

    persona: str
    restrictions_label: str
    allergies_label: str
    schema_instruction: str


_SCHEMA_FR = """{
  "title": "Nom de la recette",
  "description": "Description appétissante",
  "prep_time_minutes": 15,
  "cook_time_minutes": 30,
  "servings": 4,
  "difficulty": "easy|medium|hard",
  "cuisine_type": "Type de cuisine",
  "chef_tip": "Conseil du chef",
  "nutritional_info": {
    "calories": 450,
    "protein": 25,
    "carbs": 35,
    "fat": 15
  },
  "ingredients": [
    {
      "name": "Ingrédient",
      "quantity": 200,
      "unit": "g",
      "order_index": 0
    }
  ],
  "steps": [
    {
      "step_number": 1,
      "instruction": "Première étape détaillée"
    }
  ]
}"""

_SCHEMA_EN = """{
  "title": "Recipe name",
  "description": "Appetizing description",
  "prep_time_minutes": 15,
  "cook_time_minutes": 30,
  "servings": 4,
  "difficulty": "easy|medium|hard",
  "cuisine_type": "Cuisine type",
  "chef_tip": "Chef's tip",
  "nutritional_info": {
    "calories": 450,
    "protein": 25,
    "carbs": 35,
    "fat": 15
  },
  "ingredients": [
    {
      "name": "Ingredient",
      "quantity": 200,
      "unit": "g",
      "order_index": 0
    }
  ],
  "steps": [
    {
      "step_number": 1,
      "instruction": "Detailed first step"
    }
  ]
}"""

PROMPTS: dict[str, PromptTemplate] = {
    "fr": PromptTemplate(
        persona=(
            "Tu es un chef cuisinier expert qui génère des recettes détaillées au format JSON.\n\n"
            "Génère une recette complète et appétissante basée sur la demande de l'utilisateur."
        ),
        restrictions_label="Régimes alimentaires à respecter",
        allergies_label="Allergies à éviter",
        schema_instruction=(
            "Réponds UNIQUEMENT avec un objet JSON valide (pas de markdown, pas de texte "
            "avant ou après) avec cette structure exacte:\n" + _SCHEMA_FR
        ),
    ),
    "en": PromptTemplate(
        persona=(
            "You are an expert chef who writes detailed recipes as JSON.\n\n"
            "Create a complete, appetizing recipe based on the user's request."
        ),
        restrictions_label="Dietary restrictions to respect",
        allergies_label="Allergies to avoid",
        schema_instruction=(
            "Reply ONLY with a single valid JSON object (no markdown, no code fences, no text "
            "before or after) with this exact structure:\n" + _SCHEMA_EN
        ),
    ),
}


def get_template(locale: str) -> PromptTemplate:
    return PROMPTS.get(locale, PROMPTS["fr"])


def build_system_prompt(
    persona: str,
    restrictions: list[str],
    allergies: list[str],
    schema_instruction: str,
    restrictions_label: str = PROMPTS["fr"].restrictions_label,
    allergies_label: str = PROMPTS["fr"].allergies_label,
) -> str:
    """
    Compose the system prompt.

    Persona first, then the restrictions clause and the allergies clause
    (each only when its list is non-empty), then the schema instruction
    verbatim.
    """
    prompt = persona

    if restrictions:
        prompt += f"\n\n{restrictions_label}: {', '.join(restrictions)}"
    if allergies:
        prompt += f"\n\n{allergies_label}: {', '.join(allergies)}"

    prompt += f"\n\n{schema_instruction}"
    return prompt


def build_messages(system_prompt: str, user_request: str) -> list[dict[str, str]]:
    """Role-tagged message list for the chat completions call."""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_request},
    ]
