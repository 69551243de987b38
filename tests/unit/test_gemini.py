"""Unit tests for the Gemini recipe gateway.

The genai client is replaced with a Mock; no network calls are made.
"""

import json
import re
from unittest.mock import AsyncMock, Mock, patch

import pytest

from cookalong.models.errors import GenerationFailure, ValidationFailure
from cookalong.models.models import (
    Cooktop,
    CooktopAdaptation,
    Language,
    RecipeDraft,
    Step,
    SubstituteSuggestion,
)
from cookalong.prompts import prompts
from cookalong.services.gateway import TIP_FALLBACK
from cookalong.services.gemini import (
    GeminiRecipeGateway,
    image_to_data_url,
    is_transient_error,
    mint_recipe_id,
    parse_gemini_response,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64

DRAFT = {
    "name": "Paneer Tikka",
    "description": "Smoky grilled paneer.",
    "category": "Vegetarian",
    "prep_time": 20,
    "cook_time": 15,
    "servings": 4,
    "ingredients": ["250g paneer", "1/2 cup yogurt"],
    "steps": [{"description": "Marinate the paneer.", "time": 1800}, {"description": "Grill.", "time": 600}],
}


def text_response(payload) -> Mock:
    return Mock(text=payload if isinstance(payload, str) else json.dumps(payload))


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def gemini(client):
    return GeminiRecipeGateway(client=client, model="test-model", max_retries=3, retry_delay=1)


class TestParseGeminiResponse:
    """Test lenient JSON extraction with strict validation."""

    def test_plain_json(self):
        result = parse_gemini_response(json.dumps(DRAFT), RecipeDraft)
        assert result.name == "Paneer Tikka"

    def test_code_fenced_json(self):
        text = "```json\n" + json.dumps({"substitute": "1 cup cream", "explanation": "Rich."}) + "\n```"
        result = parse_gemini_response(text, SubstituteSuggestion)
        assert result.substitute == "1 cup cream"

    def test_json_surrounded_by_text(self):
        text = 'Here you go: {"steps": [{"description": "Heat to 120°C / 1000W", "time": 60}]} Enjoy!'
        result = parse_gemini_response(text, CooktopAdaptation)
        assert result.steps[0].time == 60

    def test_list_schema(self):
        result = parse_gemini_response(json.dumps([DRAFT, DRAFT]), list[RecipeDraft])
        assert len(result) == 2

    def test_empty_response_is_generation_failure(self):
        with pytest.raises(GenerationFailure):
            parse_gemini_response("   ", RecipeDraft)

    def test_no_json_is_generation_failure_not_validation(self):
        with pytest.raises(GenerationFailure) as exc:
            parse_gemini_response("I cannot help with that.", RecipeDraft)
        assert not isinstance(exc.value, ValidationFailure)

    def test_schema_mismatch_is_validation_failure(self):
        with pytest.raises(ValidationFailure):
            parse_gemini_response(json.dumps({"name": "Missing everything"}), RecipeDraft)


class TestHelpers:
    """Test id minting, transient error detection and image encoding."""

    def test_minted_ids_are_unique_and_prefixed(self):
        first, second = mint_recipe_id("Paneer Tikka!"), mint_recipe_id("Paneer Tikka!")

        assert first != second
        assert re.fullmatch(r"generated-paneer-tikka-[0-9a-f]{12}", first)

    def test_mint_recipe_id_without_usable_name(self):
        assert mint_recipe_id("???").startswith("generated-recipe-")

    @pytest.mark.parametrize(
        "error,expected",
        [
            (TimeoutError("slow"), True),
            (ConnectionError("reset"), True),
            (Exception("503 Service Unavailable"), True),
            (Exception("429 RESOURCE_EXHAUSTED"), True),
            (Exception("400 API key not valid"), False),
        ],
    )
    def test_is_transient_error(self, error, expected):
        assert is_transient_error(error) is expected

    def test_image_to_data_url_png(self):
        assert image_to_data_url(PNG_BYTES).startswith("data:image/png;base64,")

    def test_image_to_data_url_jpeg(self):
        assert image_to_data_url(JPEG_BYTES).startswith("data:image/jpeg;base64,")

    def test_image_to_data_url_rejects_unknown_format(self):
        with pytest.raises(ValidationFailure, match="Unexpected image format"):
            image_to_data_url(b"not an image at all")

    def test_image_to_data_url_rejects_oversized(self):
        with patch("cookalong.services.gemini.config") as mock_config:
            mock_config.MAX_IMAGE_SIZE_MB = 0
            with pytest.raises(ValidationFailure, match="exceeds limit"):
                image_to_data_url(PNG_BYTES)


class TestRecipeGeneration:
    """Test recipe generation calls."""

    @pytest.mark.asyncio
    async def test_generate_from_query_mints_generated_recipe(self, gemini, client):
        client.models.generate_content.return_value = text_response(DRAFT)

        recipe = await gemini.generate_from_query("paneer")

        assert recipe.is_generated is True
        assert recipe.id.startswith("generated-paneer-tikka-")
        assert recipe.image_url == ""
        assert recipe.steps[0] == Step(description="Marinate the paneer.", time=1800)
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_generated_ids_distinct_for_same_payload(self, gemini, client):
        client.models.generate_content.return_value = text_response(DRAFT)

        first = await gemini.generate_from_query("paneer")
        second = await gemini.generate_from_query("paneer")

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_generate_for_category_returns_list(self, gemini, client):
        client.models.generate_content.return_value = text_response([DRAFT, DRAFT])

        recipes = await gemini.generate_for_category("Vegetarian")

        assert len(recipes) == 2
        assert len({r.id for r in recipes}) == 2

    @pytest.mark.asyncio
    async def test_generate_from_ingredients_requires_ingredients(self, gemini, client):
        with pytest.raises(GenerationFailure):
            await gemini.generate_from_ingredients([])
        client.models.generate_content.assert_not_called()


class TestRetries:
    """Test retry with exponential backoff."""

    @pytest.mark.asyncio
    @patch("cookalong.services.gemini.asyncio.sleep", new_callable=AsyncMock)
    async def test_transient_error_retried_then_succeeds(self, mock_sleep, gemini, client):
        client.models.generate_content.side_effect = [
            Exception("503 unavailable"),
            Exception("503 unavailable"),
            text_response(DRAFT),
        ]

        recipe = await gemini.generate_from_query("paneer")

        assert recipe.name == "Paneer Tikka"
        assert client.models.generate_content.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @pytest.mark.asyncio
    @patch("cookalong.services.gemini.asyncio.sleep", new_callable=AsyncMock)
    async def test_permanent_error_not_retried(self, mock_sleep, gemini, client):
        client.models.generate_content.side_effect = Exception("400 API key not valid")

        with pytest.raises(GenerationFailure, match="API key not valid"):
            await gemini.generate_from_query("paneer")

        assert client.models.generate_content.call_count == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    @patch("cookalong.services.gemini.asyncio.sleep", new_callable=AsyncMock)
    async def test_invalid_payload_retried_and_last_error_raised(self, mock_sleep, gemini, client):
        client.models.generate_content.return_value = text_response({"name": "incomplete"})

        with pytest.raises(ValidationFailure):
            await gemini.generate_from_query("paneer")

        assert client.models.generate_content.call_count == 3


class TestTipsAndSubstitutes:
    """Test tips and substitutes."""

    @pytest.mark.asyncio
    async def test_get_tip_returns_text(self, gemini, client):
        client.models.generate_content.return_value = Mock(text="  Keep the flame low.  ")

        assert await gemini.get_tip("Dal", "Simmer") == "Keep the flame low."

    @pytest.mark.asyncio
    async def test_get_tip_never_raises(self, gemini, client):
        client.models.generate_content.side_effect = Exception("network down")

        assert await gemini.get_tip("Dal", "Simmer") == TIP_FALLBACK

    @pytest.mark.asyncio
    async def test_get_substitute(self, gemini, client):
        client.models.generate_content.return_value = text_response(
            {"substitute": "1 cup coconut milk", "explanation": "Adds creaminess."}
        )

        suggestion = await gemini.get_substitute("Curry", ["1 cup cream"], "1 cup cream")

        assert suggestion.substitute == "1 cup coconut milk"


class TestTranslationAndAdaptation:
    """Test that timer durations never come from the model."""

    @pytest.mark.asyncio
    async def test_translate_keeps_source_times(self, gemini, client, recipe):
        client.models.generate_content.return_value = text_response(
            {
                "name": "मसाला चाय",
                "description": "मसालेदार चाय",
                "ingredients": ["पानी", "दूध", "चाय पत्ती", "अदरक"],
                "steps": [{"description": f"चरण {i}", "time": 1} for i in range(len(recipe.steps))],
            }
        )

        translation = await gemini.translate(recipe, Language.HINDI)

        assert [s.time for s in translation.steps] == [s.time for s in recipe.steps]
        assert translation.steps[0].description == "चरण 0"

    @pytest.mark.asyncio
    @patch("cookalong.services.gemini.asyncio.sleep", new_callable=AsyncMock)
    async def test_translate_step_count_mismatch(self, mock_sleep, gemini, client, recipe):
        client.models.generate_content.return_value = text_response(
            {"name": "x", "description": "y", "ingredients": [], "steps": [{"description": "one", "time": 0}]}
        )

        with pytest.raises(ValidationFailure, match="steps"):
            await gemini.translate(recipe, Language.HINGLISH)

    @pytest.mark.asyncio
    async def test_adapt_for_cooktop_keeps_times(self, gemini, client, recipe):
        client.models.generate_content.return_value = text_response(
            {"steps": [{"description": f"Induction step {i}", "time": 5} for i in range(len(recipe.steps))]}
        )

        adaptation = await gemini.adapt_for_cooktop(list(recipe.steps), Cooktop.INDUCTION, recipe_name="Chai")

        assert [s.time for s in adaptation.steps] == [s.time for s in recipe.steps]
        prompt = client.models.generate_content.call_args.kwargs["contents"]
        assert "Induction Cooktop" in prompt
        assert '"Chai"' in prompt

    @pytest.mark.asyncio
    async def test_adapt_for_default_cooktop_is_failure(self, gemini, client, recipe):
        with pytest.raises(GenerationFailure):
            await gemini.adapt_for_cooktop(list(recipe.steps), Cooktop.LPG)
        client.models.generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_adapt_for_ingredients(self, gemini, client, recipe):
        client.models.generate_content.return_value = text_response(
            {"ingredients": ["2 cups water"], "steps": [{"description": "Boil water.", "time": 300}]}
        )

        adaptation = await gemini.adapt_for_ingredients(
            recipe.name, list(recipe.ingredients), ["2 cups water"], list(recipe.steps)
        )

        assert adaptation.ingredients == ["2 cups water"]
        prompt = client.models.generate_content.call_args.kwargs["contents"]
        assert "I only have the following ingredients: 2 cups water" in prompt


class TestImageGeneration:
    """Test Imagen image generation."""

    @pytest.mark.asyncio
    async def test_generate_image_returns_data_url(self, gemini, client):
        image = Mock()
        image.image.image_bytes = JPEG_BYTES
        client.models.generate_images.return_value = Mock(generated_images=[image])

        url = await gemini.generate_image("Chai", "Spiced tea")

        assert url.startswith("data:image/jpeg;base64,")
        assert client.models.generate_images.call_args.kwargs["prompt"] == prompts.image_prompt("Chai", "Spiced tea")

    @pytest.mark.asyncio
    async def test_generate_image_without_images_fails(self, gemini, client):
        client.models.generate_images.return_value = Mock(generated_images=[])

        with pytest.raises(GenerationFailure, match="no image"):
            await gemini.generate_image("Chai", "Spiced tea")

    @pytest.mark.asyncio
    async def test_generate_image_sdk_error_fails(self, gemini, client):
        client.models.generate_images.side_effect = Exception("quota")

        with pytest.raises(GenerationFailure, match="quota"):
            await gemini.generate_image("Chai", "Spiced tea")
