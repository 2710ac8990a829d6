#!/usr/bin/env python3
"""
Tests for system prompt rendering
"""
from replybot.llm.prompt_builder import INSTRUCTIONS, build_system_prompt, format_price
from replybot.models import FAQ, KnowledgeSnapshot, Product, RawEntry


def test_format_price_uses_whole_rupiah():
    assert format_price(15000) == "Rp 15.000"
    assert format_price(1250000.4) == "Rp 1.250.000"
    assert format_price(0) == "Rp 0"


def test_minimal_snapshot_has_header_and_instructions():
    prompt = build_system_prompt(KnowledgeSnapshot(business_name="Toko X", tone="ramah"))

    assert prompt.startswith("Anda adalah asisten virtual untuk Toko X.\nTone komunikasi: ramah.\n\n")
    assert prompt.endswith(INSTRUCTIONS)
    assert "=== PERTANYAAN UMUM ===" not in prompt
    assert "=== DAFTAR PRODUK ===" not in prompt


def test_sections_are_numbered_in_order():
    snapshot = KnowledgeSnapshot(
        business_name="Toko X",
        tone="ramah",
        faqs=(FAQ("Jam buka?", "08.00-21.00"), FAQ("Lokasi?", "Jl. Merdeka 1")),
        products=(Product("Kopi Susu", 18000), Product("Roti Bakar", 15000)),
    )

    prompt = build_system_prompt(snapshot)

    assert "1. Q: Jam buka?\n   A: 08.00-21.00\n" in prompt
    assert "2. Q: Lokasi?\n   A: Jl. Merdeka 1\n" in prompt
    assert "1. Kopi Susu: Rp 18.000\n" in prompt
    assert "2. Roti Bakar: Rp 15.000\n" in prompt
    assert prompt.index("=== PERTANYAAN UMUM ===") < prompt.index("=== DAFTAR PRODUK ===")


def test_raw_entries_render_as_sorted_json():
    snapshot = KnowledgeSnapshot(
        business_name="Apotek Sehat",
        tone="formal",
        raw_entries=(RawEntry("policy", "Pengembalian", {"hari": 7, "catatan": "struk wajib"}),),
    )

    prompt = build_system_prompt(snapshot)

    assert "**Pengembalian** (policy):\n" in prompt
    assert '{\n  "catatan": "struk wajib",\n  "hari": 7\n}' in prompt


def test_relevant_context_block():
    snapshot = KnowledgeSnapshot(business_name="Toko X", tone="ramah")
    prompt = build_system_prompt(snapshot, relevant_context="Relevant information from knowledge base:\n\n1. Q: a\n")

    assert "=== INFORMASI RELEVAN ===\nRelevant information from knowledge base:" in prompt
    assert prompt.index("=== INFORMASI RELEVAN ===") < prompt.index("Instruksi:")


def test_same_snapshot_renders_identically():
    snapshot = KnowledgeSnapshot(
        business_name="Toko X",
        tone="ramah",
        products=(Product("Kopi", 10000),),
        raw_entries=(RawEntry("promo", "Diskon", {"b": 1, "a": 2}),),
    )
    assert build_system_prompt(snapshot) == build_system_prompt(snapshot)


if __name__ == "__main__":
    test_format_price_uses_whole_rupiah()
    test_sections_are_numbered_in_order()
    test_raw_entries_render_as_sorted_json()
    print("✅ Prompt builder tests passed")
