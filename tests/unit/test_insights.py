"""
Unit tests for partnerhub/engine/insights.py.
call_ai is patched where insights imports it.
"""

from unittest.mock import patch

from partnerhub.bus.events import EVENT_INSIGHTS_READY
from partnerhub.engine.insights import (
    EMPTY_MESSAGE, FALLBACK_MESSAGE, build_insights_prompt, build_network_summary,
    generate_network_insights,
)
from partnerhub.models import Company


COMPANIES = [
    Company(id='a', name='Imobiliária Norte', broker_count=12, commission_rate=4.5, account_owner='Ana'),
    Company(id='b', name='Sul Imóveis', broker_count=5, commission_rate=3.0, account_owner='Bruno'),
]


def test_summary_lists_every_company():
    summary = build_network_summary(COMPANIES)
    assert "Imobiliária Norte (Brokers: 12, Commission: 4.5%, Account owner: Ana)" in summary
    assert "Sul Imóveis" in summary


def test_prompt_embeds_summary():
    assert build_network_summary(COMPANIES) in build_insights_prompt(COMPANIES)


def test_empty_collection_skips_ai():
    with patch('partnerhub.engine.insights.call_ai') as mock_ai:
        assert generate_network_insights([]) == EMPTY_MESSAGE
    mock_ai.assert_not_called()


def test_returns_ai_text_and_emits_event():
    with patch('partnerhub.engine.insights.call_ai', return_value='Grow the north region.') as mock_ai, \
         patch('partnerhub.engine.insights.bus.emit') as mock_emit:
        text = generate_network_insights(COMPANIES, model='claude')
    assert text == 'Grow the north region.'
    assert mock_ai.call_args[1]['model'] == 'claude'
    assert mock_emit.call_args[0][0] == EVENT_INSIGHTS_READY


def test_uses_default_model():
    with patch('partnerhub.engine.insights.call_ai', return_value='ok') as mock_ai, \
         patch('partnerhub.engine.insights.config') as mock_config:
        mock_config.DEFAULT_AI_MODEL = 'deepseek-reasoner'
        generate_network_insights(COMPANIES)
    assert mock_ai.call_args[1]['model'] == 'deepseek-reasoner'


def test_missing_key_falls_back():
    with patch('partnerhub.engine.insights.call_ai', side_effect=ValueError("DEEPSEEK_API_KEY not set")):
        assert generate_network_insights(COMPANIES) == FALLBACK_MESSAGE


def test_backend_failure_falls_back():
    with patch('partnerhub.engine.insights.call_ai', side_effect=RuntimeError("503")):
        assert generate_network_insights(COMPANIES) == FALLBACK_MESSAGE
