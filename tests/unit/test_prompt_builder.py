"""Unit tests for generation prompt construction."""

from planvision.services.prompt_builder import PromptParams, build_prompt, build_prompt_from_params


def floor_plan_params(**overrides):
    params = {
        "image_type_label": "Floor Plan",
        "image_type_value": "floor_plan_2d",
        "perspective_angle": 90.0,
        "perspective_x": 0.4,
        "perspective_y": 0.6,
    }
    params.update(overrides)
    return PromptParams(**params)


class TestVariantSelection:
    """Tests for choosing between the floor-plan and standard prompts."""

    def test_floor_plan_with_angle_uses_camera_prompt(self):
        prompt = build_prompt_from_params(floor_plan_params())

        assert prompt.startswith("TASK: Transform this 2D floor plan")
        assert "CAMERA POSITION INDICATOR:" in prompt

    def test_floor_plan_without_angle_uses_standard_prompt(self):
        prompt = build_prompt_from_params(floor_plan_params(perspective_angle=None))

        assert "CAMERA POSITION INDICATOR:" not in prompt
        assert "photograph into a modern interior design visualization" in prompt

    def test_zero_angle_still_counts_as_indicator(self):
        assert floor_plan_params(perspective_angle=0.0).has_perspective_indicator

    def test_standard_prompt_uses_lowercased_label(self):
        prompt = build_prompt_from_params(
            PromptParams(image_type_label="Living Room", style_name="Japandi")
        )
        assert prompt.startswith(
            "TASK: Transform this living room photograph into a Japandi interior design visualization"
        )
        assert "PRESERVE FROM SOURCE IMAGE:" in prompt


class TestSections:
    """Tests for the optional prompt sections."""

    def test_default_style_name(self):
        prompt = build_prompt_from_params(PromptParams(image_type_label="Room"))
        assert "STYLE TO APPLY: modern" in prompt
        assert "Design principles:" not in prompt

    def test_design_principles(self):
        prompt = build_prompt_from_params(
            PromptParams(image_type_label="Room", style_prompt_fragment="warm minimalism")
        )
        assert "Design principles: warm minimalism" in prompt

    def test_palette_requires_primary(self):
        prompt = build_prompt_from_params(
            PromptParams(image_type_label="Room", color_secondary_hex="#111111")
        )
        assert "COLOR PALETTE APPLICATION:" not in prompt
        assert "#111111" not in prompt

    def test_full_palette(self):
        prompt = build_prompt_from_params(
            PromptParams(
                image_type_label="Room",
                color_primary_hex="#AA0000",
                color_secondary_hex="#00AA00",
                color_neutral_hex="#EEEEEE",
            )
        )
        assert "- Primary (#AA0000):" in prompt
        assert "- Secondary (#00AA00):" in prompt
        assert "- Neutral (#EEEEEE): Walls, floors, large surfaces, background elements" in prompt

    def test_floor_plan_neutral_usage(self):
        prompt = build_prompt_from_params(
            floor_plan_params(color_primary_hex="#AA0000", color_neutral_hex="#EEEEEE")
        )
        assert "- Neutral (#EEEEEE): Walls, floors, large surfaces\n" in prompt

    def test_custom_instructions(self):
        prompt = build_prompt_from_params(
            PromptParams(image_type_label="Room", custom_instructions="add a reading nook")
        )
        assert "ADDITIONAL REQUIREMENTS: add a reading nook" in prompt

    def test_output_requirements_close_every_prompt(self):
        for params in (PromptParams(image_type_label="Room"), floor_plan_params()):
            prompt = build_prompt_from_params(params)
            assert "OUTPUT REQUIREMENTS:" in prompt
            assert prompt.splitlines()[-1].startswith("- ")


class TestBuildPrompt:
    """Tests for building from a stored config."""

    def test_deterministic_for_config(self, render_config):
        first = build_prompt(render_config)

        assert first == build_prompt(render_config)
        assert "kitchen photograph into a Scandinavian interior design" in first
        assert "Design principles: light woods, clean lines" in first
        assert "- Primary (#336699):" in first
