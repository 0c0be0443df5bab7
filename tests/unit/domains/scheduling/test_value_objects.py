from clinicbot.domains.scheduling.application.utils import to_gateway_number
from clinicbot.domains.scheduling.domain.value_objects import AppointmentStatus, Language, MessageStatus


class TestLanguage:
    def test_english_preference(self):
        assert Language.from_preference("en") is Language.EN

    def test_anything_else_uses_default(self):
        assert Language.from_preference("es") is Language.PT
        assert Language.from_preference(None) is Language.PT
        assert Language.from_preference("pt-BR", default="en") is Language.EN


class TestStatuses:
    def test_no_show_candidates(self):
        assert set(AppointmentStatus.no_show_candidates()) == {AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN}
        assert not AppointmentStatus.NO_SHOW.is_no_show_candidate()

    def test_successful_statuses(self):
        assert MessageStatus.FAILED not in MessageStatus.successful()
        assert MessageStatus.READ in MessageStatus.successful()


class TestGatewayNumber:
    def test_strips_formatting_and_jid(self):
        assert to_gateway_number("+1 (954) 555-0100") == "19545550100"
        assert to_gateway_number("5511999990000@s.whatsapp.net") == "5511999990000"
