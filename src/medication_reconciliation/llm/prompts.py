# ============================================================================
# src/medication_reconciliation/llm/prompts.py
# ============================================================================
"""
Prompt templates for the primary extraction oracle.

The response contract is fixed: a JSON object with a `medications` array
and a `stoppedMedications` string array.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class PromptTemplate:
    """Prompt template"""
    name: str
    template: str
    description: str
    required_fields: List[str] = field(default_factory=list)

    def format(self, **kwargs) -> str:
        missing = [f for f in self.required_fields if f not in kwargs]
        if missing:
            raise ValueError(f"Missing required fields: {missing}")

        return self.template.format(**kwargs)


MEDICATION_EXTRACTION_TEMPLATE = PromptTemplate(
    name="medication_extraction",
    template='''You are an expert NICU/PICU clinical pharmacist. Extract ALL medications mentioned in this clinical note with precise details.

Patient Context:
{patient_context}

Clinical Note:
"""
{note_text}
"""

INSTRUCTIONS:
1. Extract EVERY medication mentioned (including IV fluids, blood products)
2. For each medication, identify:
   - Exact name (generic preferred)
   - Dose with units (e.g., "100mg/kg", "5mg")
   - Route (IV, PO, IM, SC, etc.)
   - Frequency (q12h, BD, TID, continuous, etc.)
   - Action: "add" (new), "continue" (ongoing), "update" (dose/route/frequency change), "stop" (discontinue)
3. Recognize all formats:
   - Traditional: "Inj Ampicillin 100mg/kg IV q12h"
   - Natural: "Start gentamicin 4mg/kg IV daily"
   - Shorthand: "Continue caffeine 5mg"
   - Changes: "Increase caffeine to 10mg"
   - Stop commands: "Stop ampicillin", "Discontinue vancomycin"
4. For stopped medications, also list them separately in stoppedMedications array

Return ONLY valid JSON (no markdown, no explanations):
{{
  "medications": [
    {{
      "name": "Ampicillin",
      "dose": "100mg/kg",
      "route": "IV",
      "frequency": "q12h",
      "action": "add",
      "confidence": 0.95,
      "sourceSnippet": "Inj Ampicillin 100mg/kg IV q12h"
    }}
  ],
  "stoppedMedications": ["Gentamicin", "Vancomycin"]
}}

IMPORTANT:
- confidence: 0.0-1.0 (how certain you are about this extraction)
- If no medications found, return empty arrays
- Normalize drug names (Amp -> Ampicillin)
- Include the exact text snippet in sourceSnippet
''',
    description="Extract medication commands and stop instructions from a clinical note",
    required_fields=["patient_context", "note_text"],
)
