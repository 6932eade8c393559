import pytest
from pydantic import ValidationError

from escolas.domain.escola import Escola
from escolas.exceptions.base import EntityValidationError

GUID = "123e4567-e89b-12d3-a456-426614174000"


class TestEscolaIdentifier:

    def test_exactly_36_characters_is_accepted_whatever_the_content(self):
        escola = Escola(guid="x" * 36)
        assert escola.guid == "x" * 36

    def test_identifier_is_trimmed_before_the_length_check(self):
        escola = Escola(guid=f"  {GUID}  ")
        assert escola.guid == GUID

    @pytest.mark.parametrize("guid", ["x" * 35, "x" * 37, "short"])
    def test_wrong_length_is_rejected(self, guid):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=guid)
        assert exc_info.value.fields == ["EscolaGUID"]
        assert "36" in exc_info.value.message

    @pytest.mark.parametrize("guid", ["", "   ", None, 123])
    def test_blank_or_non_string_is_rejected(self, guid):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=guid)
        assert exc_info.value.fields == ["EscolaGUID"]

    def test_missing_identifier_is_rejected(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(nome="Escola Azul")
        assert exc_info.value.fields == ["EscolaGUID"]


class TestEscolaNome:

    @pytest.mark.parametrize("length", [3, 100])
    def test_boundaries_inside_range_are_accepted(self, length):
        escola = Escola(guid=GUID, nome="a" * length)
        assert len(escola.nome) == length

    @pytest.mark.parametrize("length", [2, 101])
    def test_boundaries_outside_range_are_rejected(self, length):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=GUID, nome="a" * length)
        assert exc_info.value.fields == ["EscolaNome"]
        assert exc_info.value.error_code == "invalid_input"

    def test_length_is_measured_after_trimming(self):
        with pytest.raises(EntityValidationError):
            Escola(guid=GUID, nome="  ab  ")

        escola = Escola(guid=GUID, nome="  abc  ")
        assert escola.nome == "abc"

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent_name_normalizes_to_none(self, value):
        assert Escola(guid=GUID, nome=value).nome is None

    def test_non_string_name_is_rejected(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=GUID, nome=12345)
        assert exc_info.value.errors == {"EscolaNome": "EscolaNome must be a string"}


class TestEscolaColors:

    @pytest.mark.parametrize("color", ["000000", "FFFFFF", "abcdef", "1A2b3C"])
    def test_valid_hex_is_accepted(self, color):
        escola = Escola(guid=GUID, cor_pri_es=color, cor_pri_cl=color, cor_sec_es=color, cor_sec_cl=color)
        assert (escola.cor_pri_es, escola.cor_pri_cl, escola.cor_sec_es, escola.cor_sec_cl) == (color,) * 4

    def test_hex_is_trimmed(self):
        assert Escola(guid=GUID, cor_sec_cl=" 1A2B3C ").cor_sec_cl == "1A2B3C"

    @pytest.mark.parametrize("color", ["#1A2B3C", "1A2B3", "1A2B3C4", "GGGGGG", "12 456"])
    def test_invalid_hex_is_rejected_naming_the_field(self, color):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=GUID, cor_sec_es=color)
        assert exc_info.value.fields == ["EscolaCorSecEs"]
        assert exc_info.value.message == "EscolaCorSecEs must be a 6-digit HEX color"

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent_color_normalizes_to_none(self, value):
        assert Escola(guid=GUID, cor_pri_cl=value).cor_pri_cl is None

    def test_every_invalid_field_is_reported(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=GUID, nome="a", cor_pri_es="zzz")
        assert set(exc_info.value.fields) == {"EscolaNome", "EscolaCorPriEs"}


class TestEscolaIcone:

    def test_bytes_are_kept_as_is(self):
        assert Escola(guid=GUID, icone=b"\x00\x01\xff").icone == b"\x00\x01\xff"

    @pytest.mark.parametrize("value", [bytearray(b"abc"), memoryview(b"abc")])
    def test_driver_buffer_types_become_bytes(self, value):
        icone = Escola(guid=GUID, icone=value).icone
        assert isinstance(icone, bytes)
        assert icone == b"abc"

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent_icon_normalizes_to_none(self, value):
        assert Escola(guid=GUID, icone=value).icone is None

    def test_non_binary_icon_is_rejected(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Escola(guid=GUID, icone=42)
        assert exc_info.value.fields == ["EscolaIcone"]


class TestEscolaConstructionAndChanges:

    def test_wire_names_are_accepted(self):
        escola = Escola(EscolaGUID=GUID, EscolaNome="Colégio Azul", EscolaCorPriEs="1A2B3C")
        assert escola.guid == GUID
        assert escola.nome == "Colégio Azul"
        assert escola.cor_pri_es == "1A2B3C"
        assert escola.icone is None

    def test_instances_are_immutable(self):
        escola = Escola(guid=GUID, nome="Escola Azul")
        with pytest.raises(ValidationError):
            escola.nome = "Outra Escola"

    def test_with_changes_returns_a_new_revalidated_instance(self):
        escola = Escola(guid=GUID, nome="Escola Azul", cor_pri_es="111111")

        changed = escola.with_changes(nome=" Escola Verde ", cor_pri_es=None)

        assert changed is not escola
        assert changed.guid == GUID
        assert changed.nome == "Escola Verde"
        assert changed.cor_pri_es is None
        # original untouched
        assert escola.nome == "Escola Azul"
        assert escola.cor_pri_es == "111111"

    def test_with_changes_runs_the_field_rules(self):
        escola = Escola(guid=GUID, nome="Escola Azul")
        with pytest.raises(EntityValidationError) as exc_info:
            escola.with_changes(cor_pri_cl="nothex")
        assert exc_info.value.fields == ["EscolaCorPriCl"]

    def test_identifier_cannot_be_changed(self):
        escola = Escola(guid=GUID)
        with pytest.raises(EntityValidationError) as exc_info:
            escola.with_changes(guid="y" * 36)
        assert exc_info.value.fields == ["EscolaGUID"]

    def test_model_copy_with_update_runs_the_field_rules(self):
        escola = Escola(guid=GUID, nome="Escola Azul")

        with pytest.raises(EntityValidationError) as exc_info:
            escola.model_copy(update={"nome": "a", "cor_pri_es": "zzz"})

        assert set(exc_info.value.fields) == {"EscolaNome", "EscolaCorPriEs"}
        assert escola.nome == "Escola Azul"

    def test_model_copy_with_update_normalizes_values(self):
        escola = Escola(guid=GUID, nome="Escola Azul")

        copied = escola.model_copy(update={"cor_pri_es": " ABCDEF "})

        assert copied.cor_pri_es == "ABCDEF"
        assert copied.nome == "Escola Azul"

    def test_model_copy_without_update_is_an_equal_instance(self):
        escola = Escola(guid=GUID, nome="Escola Azul")
        assert escola.model_copy() == escola
