"""Template rendering: `{name}` placeholder substitution over stored template bodies."""

import re
from datetime import datetime, tzinfo
from typing import Any

from pytz import UTC, timezone

from ...domain.entities import AppointmentSnapshot
from ...domain.value_objects import Language

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

WEEKDAY_SHORT: dict[Language, list[str]] = {
    Language.PT: ["Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom"],
    Language.EN: ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
}


TYPE_LABELS: dict[str, dict[Language, str]] = {
    "initial_consultation": {Language.PT: "Consulta Inicial", Language.EN: "Initial Consultation"},
    "follow_up": {Language.PT: "Retorno", Language.EN: "Follow-up"},
    "functional_medicine": {Language.PT: "Medicina Funcional", Language.EN: "Functional Medicine"},
    "bhrt": {Language.PT: "BHRT", Language.EN: "BHRT"},
    "male_hypertrophy": {Language.PT: "Hipertrofia Masc.", Language.EN: "Male Hypertrophy"},
    "female_hypertrophy": {Language.PT: "Hipertrofia Fem.", Language.EN: "Female Hypertrophy"},
    "insulin_resistance": {Language.PT: "Resist. Insulina", Language.EN: "Insulin Resistance"},
    "chronic_inflammation": {Language.PT: "Inflam. Crônica", Language.EN: "Chronic Inflammation"},
    "thyroid_support": {Language.PT: "Tireoide", Language.EN: "Thyroid Support"},
    "morpheus8": {Language.PT: "Morpheus8", Language.EN: "Morpheus8"},
    "botulinum_toxin": {Language.PT: "Botox", Language.EN: "Botulinum Toxin"},
    "fillers": {Language.PT: "Preenchimento", Language.EN: "Fillers"},
    "skin_boosters": {Language.PT: "Skin Boosters", Language.EN: "Skin Boosters"},
    "iv_protocols": {Language.PT: "Protocolos IV", Language.EN: "IV Protocols"},
    "customized_iv_nutrition": {Language.PT: "IV Nutrição", Language.EN: "IV Nutrition"},
    "nutrient_testing": {Language.PT: "Teste Nutrientes", Language.EN: "Nutrient Testing"},
    "nad_therapy": {Language.PT: "NAD+", Language.EN: "NAD+ Therapy"},
    "vitamin_injections": {Language.PT: "Vitaminas", Language.EN: "Vitamin Injections"},
    "iron_infusions": {Language.PT: "Infusão Ferro", Language.EN: "Iron Infusions"},
    "chelation_therapy": {Language.PT: "Quelação", Language.EN: "Chelation Therapy"},
    "high_cortisol": {Language.PT: "Cortisol Alto", Language.EN: "High Cortisol"},
    "bpc_157": {Language.PT: "BPC-157", Language.EN: "BPC-157"},
    "thymosin_alpha_1": {Language.PT: "Thymosin A1", Language.EN: "Thymosin A1"},
    "cjc_1295_ipamorelin": {Language.PT: "CJC/Ipam.", Language.EN: "CJC/Ipam."},
    "pt_141": {Language.PT: "PT-141", Language.EN: "PT-141"},
    "selank": {Language.PT: "Selank", Language.EN: "Selank"},
    "kpv": {Language.PT: "KPV", Language.EN: "KPV"},
    "dihexa": {Language.PT: "Dihexa", Language.EN: "Dihexa"},
    "mots_c": {Language.PT: "MOTS-c", Language.EN: "MOTS-c"},
    # legacy types still present on old rows
    "hormone_check": {Language.PT: "Av. Hormonal", Language.EN: "Hormone Check"},
    "lab_review": {Language.PT: "Rev. Exames", Language.EN: "Lab Review"},
    "nutrition": {Language.PT: "Nutrição", Language.EN: "Nutrition"},
    "health_coaching": {Language.PT: "Coaching", Language.EN: "Coaching"},
    "therapy": {Language.PT: "Terapia", Language.EN: "Therapy"},
    "personal_training": {Language.PT: "Personal", Language.EN: "Personal Training"},
}


def type_label(appointment_type: str, language: Language) -> str:
    """Short label for an appointment type; unknown types are returned unchanged."""
    return TYPE_LABELS.get(appointment_type, {}).get(language, appointment_type)


class TemplateRenderer:
    """Builds placeholder values for an appointment and substitutes them into a body."""

    def __init__(self, timezone_name: str = "UTC"):
        self._tz: tzinfo = timezone(timezone_name)

    @staticmethod
    def render(content: str, variables: dict[str, Any]) -> str:
        """Replace every `{key}` with its value; unknown placeholders are left as-is."""

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in variables and variables[key] is not None:
                return str(variables[key])
            return match.group(0)

        return _PLACEHOLDER.sub(_substitute, content)

    def local_time(self, instant: datetime) -> datetime:
        if instant.tzinfo is None:
            instant = UTC.localize(instant)
        return instant.astimezone(self._tz)

    def format_date_short(self, instant: datetime, language: Language) -> str:
        """`dd/mm (Seg)` in Portuguese, `mm/dd (Mon)` in English."""
        local = self.local_time(instant)
        weekday = WEEKDAY_SHORT[language][local.weekday()]
        if language is Language.PT:
            return f"{local:%d/%m} ({weekday})"
        return f"{local:%m/%d} ({weekday})"

    def format_time(self, instant: datetime) -> str:
        return f"{self.local_time(instant):%H:%M}"

    def build_variables(
        self,
        appointment: AppointmentSnapshot,
        language: Language,
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        patient_name = appointment.patient.full_name
        variables: dict[str, Any] = {
            "nome": patient_name,
            "paciente": patient_name,
            "medico": appointment.provider.full_name,
            "tipo": type_label(appointment.type, language),
            "data": self.format_date_short(appointment.scheduled_at, language),
            "hora": self.format_time(appointment.scheduled_at),
        }
        if extra:
            variables.update(extra)
        return variables
