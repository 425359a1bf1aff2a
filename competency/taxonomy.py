"""UK-SPEC competency taxonomy.

The taxonomy is fixed for the lifetime of a process. The built-in copy below
is also the seed data for the competency_code table; a process that treats
the database as authoritative loads it once at startup with
DatabaseManager.load_taxonomy() and passes it to the extraction functions.
"""

import re
from typing import Dict, Iterable, List, Mapping, Optional

from models.competency_analysis import CompetencyCode


CODE_PATTERN = re.compile(r"[A-E][1-6]")

CATEGORY_LABELS: Dict[str, str] = {
    "A": "Knowledge & Understanding",
    "B": "Design & Development",
    "C": "Responsibility & Management",
    "D": "Communication & Interpersonal",
    "E": "Professional Commitment",
}

UK_SPEC_COMPETENCY_CODES: List[dict] = [
    # Category A: Knowledge and understanding
    {
        "id": "A1",
        "category": "A",
        "title": "Have maintained and extended a sound theoretical approach to enable them to develop their particular role",
        "description": "Formal training related to your role, learning and developing new engineering knowledge, understanding current and emerging technology and technical best practice, developing broader and deeper knowledge base through research and experimentation, learning new engineering theories and techniques in the workplace.",
    },
    {
        "id": "A2",
        "category": "A",
        "title": "Are developing technological solutions to unusual or challenging problems, using their knowledge and understanding and/or dealing with complex technical issues or situations with significant levels of risk",
        "description": "Carrying out technical research and development, developing new designs/processes/systems based on new or evolving technology, carrying out complex and/or non-standard technical analyses, developing solutions involving complex or multi-disciplinary technology, developing and evaluating continuous improvement systems, developing solutions in safety-critical industries or applications.",
    },
    # Category B: Design, development and solving engineering problems
    {
        "id": "B1",
        "category": "B",
        "title": "Take an active role in the identification and definition of project requirements, problems and opportunities",
        "description": "Identifying projects or technical improvements to products/processes/systems, preparing specifications taking account of functional and other requirements, establishing user requirements, reviewing specifications and tenders to identify technical issues and potential improvements, carrying out technical risk analysis and identifying mitigation measures, considering and implementing new and emerging technologies.",
    },
    {
        "id": "B2",
        "category": "B",
        "title": "Can identify the appropriate investigations and research needed to undertake the design, development and analysis required to complete an engineering task and conduct these activities effectively",
        "description": "Identifying and agreeing appropriate research methodologies, investigating technical issues and identifying potential solutions, identifying and carrying out physical tests or trials and analysing results, carrying out technical simulations or analysis, preparing, presenting and agreeing design recommendations with appropriate analysis of risk.",
    },
    {
        "id": "B3",
        "category": "B",
        "title": "Can implement engineering tasks and evaluate the effectiveness of engineering solutions",
        "description": "Ensuring that the application of the design results in the appropriate practical outcome, implementing design solutions taking account of critical constraints, identifying and implementing lessons learned, evaluating existing designs or processes and identifying improvements, actively learning from feedback on results.",
    },
    # Category C: Responsibility, management and leadership
    {
        "id": "C1",
        "category": "C",
        "title": "Plan the work and resources needed to enable effective implementation of a significant engineering task or project",
        "description": "Preparing budgets and associated work programmes, systematically reviewing the factors affecting project implementation, carrying out project risk assessments, leading on preparing and agreeing implementation plans, negotiating and agreeing arrangements with stakeholders.",
    },
    {
        "id": "C2",
        "category": "C",
        "title": "Manage (organise, direct and control), programme or schedule, budget and resource elements of a significant engineering task or project",
        "description": "Operating or defining appropriate management systems, managing the balance between quality, cost and time, monitoring progress and associated costs, establishing and maintaining quality standards, interfacing effectively with stakeholders.",
    },
    {
        "id": "C3",
        "category": "C",
        "title": "Lead teams or technical specialisms and assist others to meet changing technical and managerial needs",
        "description": "Agreeing objectives and work plans with teams, reinforcing team commitment to professional standards, leading and supporting team development, assessing team and individual performance, providing specialist knowledge and guidance.",
    },
    {
        "id": "C4",
        "category": "C",
        "title": "Bring about continuous quality improvement and promote best practice",
        "description": "Promoting quality throughout the organisation, developing and maintaining quality standards, supporting project evaluation, implementing and sharing lessons learned.",
    },
    # Category D: Communication and interpersonal skills
    {
        "id": "D1",
        "category": "D",
        "title": "Communicate effectively with others, at all levels, in English",
        "description": "Preparing reports and documentation, leading and chairing meetings, exchanging information and providing advice, engaging with professional networks.",
    },
    {
        "id": "D2",
        "category": "D",
        "title": "Clearly present and discuss proposals, justifications and conclusions",
        "description": "Contributing to scientific papers, preparing and delivering presentations, preparing bids and proposals, leading work towards collective goals.",
    },
    {
        "id": "D3",
        "category": "D",
        "title": "Demonstrate personal and social skills and awareness of diversity and inclusion issues",
        "description": "Managing own emotions and awareness, being confident in changing situations, creating productive working relationships, supporting diversity and inclusion.",
    },
    # Category E: Personal and professional commitment
    {
        "id": "E1",
        "category": "E",
        "title": "Understand and comply with relevant codes of conduct",
        "description": "Demonstrating compliance with professional codes, understanding legislative frameworks, leading work within relevant legislation.",
    },
    {
        "id": "E2",
        "category": "E",
        "title": "Understand the safety implications of their role and manage, apply and improve safe systems of work",
        "description": "Taking responsibility for health and safety, developing risk management systems, applying health and safety legislation.",
    },
    {
        "id": "E3",
        "category": "E",
        "title": "Understand the principles of sustainable development and apply them in their work",
        "description": "Operating responsibly for environmental, social and economic outcomes, enhancing environmental quality, using resources efficiently, minimising environmental impact.",
    },
    {
        "id": "E4",
        "category": "E",
        "title": "Carry out and record CPD necessary to maintain and enhance competence",
        "description": "Undertaking development reviews, planning and carrying out CPD activities, maintaining evidence of development, assisting others with CPD.",
    },
    {
        "id": "E5",
        "category": "E",
        "title": "Understand the ethical issues that may arise in their role and carry out their responsibilities in an ethical manner",
        "description": "Understanding potential ethical issues, applying ethical principles, upholding organisational ethical standards.",
    },
]


class CompetencyTaxonomy:
    """Read-only set of valid competency codes, grouped by category."""

    def __init__(self, codes: Iterable[CompetencyCode]):
        ordered: Dict[str, CompetencyCode] = {}
        for code in codes:
            if code.id[0] != code.category:
                raise ValueError(
                    f"Competency code {code.id} does not belong to category {code.category}"
                )
            if code.id in ordered:
                raise ValueError(f"Duplicate competency code in taxonomy: {code.id}")
            ordered[code.id] = code
        self._codes = ordered

    @classmethod
    def from_records(cls, records: Iterable[Mapping]) -> "CompetencyTaxonomy":
        """
        Build a taxonomy from rows of the competency_code table.

        Args:
            records: Mappings with 'id' and 'category' (and optionally 'title'
                     and 'description'), e.g. Supabase rows or
                     CompetencyCodeRecord.to_dict() output.

        Raises:
            ValueError: If a row has a malformed id or mismatched category
        """
        codes = []
        for record in records:
            code_id = record.get("id")
            if not isinstance(code_id, str) or not CODE_PATTERN.fullmatch(code_id):
                raise ValueError(f"Malformed competency code id: {code_id!r}")
            codes.append(
                CompetencyCode(
                    id=code_id,
                    category=record.get("category") or code_id[0],
                    title=record.get("title") or "",
                    description=record.get("description") or "",
                )
            )
        return cls(codes)

    def is_valid_code(self, code) -> bool:
        return isinstance(code, str) and code in self._codes

    def codes_by_category(self, category: str) -> List[str]:
        return [code_id for code_id, code in self._codes.items() if code.category == category]

    def get(self, code: str) -> Optional[CompetencyCode]:
        return self._codes.get(code)

    @property
    def codes(self) -> List[str]:
        return list(self._codes)

    @property
    def categories(self) -> List[str]:
        seen = []
        for code in self._codes.values():
            if code.category not in seen:
                seen.append(code.category)
        return seen

    @staticmethod
    def category_label(category: str) -> str:
        return CATEGORY_LABELS.get(category, category)

    def __contains__(self, code) -> bool:
        return self.is_valid_code(code)

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self):
        return iter(self._codes.values())

    def __repr__(self) -> str:
        return f"CompetencyTaxonomy({', '.join(self._codes)})"


DEFAULT_TAXONOMY = CompetencyTaxonomy.from_records(UK_SPEC_COMPETENCY_CODES)


def resolve_taxonomy(taxonomy: Optional[CompetencyTaxonomy] = None) -> CompetencyTaxonomy:
    return taxonomy if taxonomy is not None else DEFAULT_TAXONOMY
