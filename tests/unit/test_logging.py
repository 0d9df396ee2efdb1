"""
Unit tests for sensitive data masking in structured logs.
"""

from flowjournal.infrastructure.logging.structured_logger import (
    MASK_VALUE,
    SensitiveDataMasker,
    SensitiveDataProcessor,
)


class TestSensitiveDataMasker:

    def test_masks_configured_keys_case_insensitively(self):
        masker = SensitiveDataMasker(["password", "token"])

        masked = masker.mask_dict({"Password": "hunter22", "email": "a@x.com", "token": "abc"})

        assert masked == {"Password": MASK_VALUE, "email": "a@x.com", "token": MASK_VALUE}

    def test_masks_nested_structures(self):
        masker = SensitiveDataMasker(["password"])

        masked = masker.mask_dict({"body": {"password": "x"}, "items": [{"password": "y"}, 3]})

        assert masked["body"]["password"] == MASK_VALUE
        assert masked["items"] == [{"password": MASK_VALUE}, 3]

    def test_masks_tokens_inside_text(self):
        text = "http://frontend.test/verify-email?token=deadbeef&x=1 Bearer abc.def.ghi"

        masked = SensitiveDataMasker.mask_string(text)

        assert "deadbeef" not in masked
        assert "abc.def.ghi" not in masked
        assert f"token={MASK_VALUE}&x=1" in masked

    def test_processor_masks_event_dict(self):
        processor = SensitiveDataProcessor(SensitiveDataMasker(["password"]))

        result = processor(None, "info", {"event": "login", "password": "secret"})

        assert result == {"event": "login", "password": MASK_VALUE}
