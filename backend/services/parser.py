import os
import tempfile

from pydantic import BaseModel, Field

from backend.config import settings
from backend.schemas.timeline import EventAnalysis

EXTERNAL_NOTE = "Values informed by the external analysis service."


class ExamValues(BaseModel):
    """Kidney function and blood count values found in an exam document."""
    urea: float | None = Field(default=None, description="Urea (ureia) in mg/dL")
    creatinine: float | None = Field(default=None, description="Creatinine (creatinina) in mg/dL")
    leukocytes: float | None = Field(default=None, description="Leukocyte count (leucocitos) per microliter")


def parse_document_bytes(file_bytes: bytes, file_name: str, llama_api_key: str | None = None) -> str:
    try:
        from llama_parse import LlamaParse
    except ImportError as exc:
        raise RuntimeError("llama_parse is not installed") from exc

    api_key = llama_api_key or settings.llama_cloud_api_key
    if not api_key:
        raise RuntimeError("LLAMA_CLOUD_API_KEY is missing")

    parser = LlamaParse(
        api_key=api_key,
        use_vendor_multimodal_model=True,
        vendor_multimodal_model_name="openai-gpt4o",
        high_res_ocr=True,
        result_type="text",
    )
    suffix = os.path.splitext(file_name)[1] or ".pdf"
    with tempfile.NamedTemporaryFile(suffix=suffix) as tmp:
        tmp.write(file_bytes)
        tmp.flush()
        documents = parser.load_data(tmp.name, extra_info={"file_name": os.path.basename(file_name)})
    return "\n\n".join(doc.text for doc in documents)


def extract_exam_values(parsed_text: str, openai_api_key: str | None = None) -> EventAnalysis:
    try:
        from llama_index.llms.openai import OpenAI
        from llama_index.program.openai import OpenAIPydanticProgram
    except ImportError as exc:
        raise RuntimeError("llama_index is not installed") from exc

    api_key = openai_api_key or settings.openai_api_key
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is missing")

    llm = OpenAI(model="gpt-4o-mini", api_key=api_key, temperature=0.0)
    program = OpenAIPydanticProgram.from_defaults(
        output_cls=ExamValues,
        llm=llm,
        prompt_template_str="""
You read Brazilian lab exam documents. Extract only these three results:
- Ureia (urea)
- Creatinina (creatinine)
- Leucocitos (leukocytes, white blood cell count)

Instructions:
- Return plain numbers; a comma is a decimal separator ("1,6" is 1.6)
- Leukocyte counts such as "13.800/mm3" mean 13800
- If a value is not present, set it as null
- Do not infer or estimate values

Exam text:
{input_text}
""",
    )
    values: ExamValues = program(input_text=parsed_text)
    return EventAnalysis(**values.model_dump(), notes=EXTERNAL_NOTE)
