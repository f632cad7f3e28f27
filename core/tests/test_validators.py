"""
Validator and sanitization tests.
"""

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings

from core.validators import (
    sanitize_text,
    validate_arrondissement,
    validate_arrondissement_list,
    validate_image_upload,
    validate_trade_list,
)


class TestSanitizeText:

    def test_strips_markup_keeps_text(self):
        assert sanitize_text('<b>Fuite</b> <script>alert(1)</script>urgente') == 'Fuite urgente'

    def test_keeps_ampersands_and_accents(self):
        assert sanitize_text("Plomberie & chauffage à l'étage") == "Plomberie & chauffage à l'étage"

    def test_empty_values_pass_through(self):
        assert sanitize_text('') == ''
        assert sanitize_text(None) is None


class TestDomainValidators:

    @pytest.mark.parametrize('value', [1, 11, 20])
    def test_valid_arrondissements(self, value):
        validate_arrondissement(value)

    @pytest.mark.parametrize('value', [0, 21, -3])
    def test_invalid_arrondissements(self, value):
        with pytest.raises(ValidationError):
            validate_arrondissement(value)

    def test_arrondissement_list_rejects_strings(self):
        with pytest.raises(ValidationError):
            validate_arrondissement_list(['11'])

    def test_trade_list(self):
        validate_trade_list(['Plomberie', 'Électricité'])
        with pytest.raises(ValidationError):
            validate_trade_list(['Astrologie'])


class TestImageUpload:

    def test_accepts_png(self, image_file):
        validate_image_upload(image_file)

    def test_rejects_extension(self):
        upload = SimpleUploadedFile('script.exe', b'MZ', content_type='application/octet-stream')
        with pytest.raises(ValidationError):
            validate_image_upload(upload)

    @override_settings(MAX_UPLOAD_SIZE_MB=0)
    def test_rejects_oversized_file(self, image_file):
        with pytest.raises(ValidationError):
            validate_image_upload(image_file)
