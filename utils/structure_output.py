import json
from typing import Optional, Type

from pydantic import BaseModel

from competency.taxonomy import CompetencyTaxonomy, resolve_taxonomy
from models.competency_analysis import AnalysisPayload


def build_structured_output_instruction(
    schema: Type[BaseModel] = AnalysisPayload,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> str:
    """
    Instruction asking the model to append the structured competency analysis.

    The model's answer is read back by extract_competency_data(), so the
    instruction pins the output to a single ```json block matching the schema.

    Args:
        schema: Pydantic BaseModel describing the JSON block
        taxonomy: Codes the model may use (defaults to UK-SPEC)
    """
    taxonomy = resolve_taxonomy(taxonomy)
    code_lines = "\n".join(
        f"- {category} ({taxonomy.category_label(category)}): "
        f"{', '.join(taxonomy.codes_by_category(category))}"
        for category in taxonomy.categories
    )

    return f"""
After your analysis, output the structured data exactly once, in a single
fenced block labelled json, matching this JSON schema:
<output_json_schema>
{json.dumps(schema.model_json_schema(), indent=2)}
</output_json_schema>

Only use these competency codes:
{code_lines}

Rules:
- confidence_percentage is a whole number between 1 and 100.
- explanation and suggestion are at least 10 characters long.
- List each demonstrated competency code once.
- If you are asking clarifying questions, do not output the json block.
    """.strip()
