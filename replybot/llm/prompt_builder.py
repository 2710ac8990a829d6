"""
System prompt builder.

Pure function of the knowledge snapshot: no I/O, no clock, no randomness,
so the same snapshot always renders to the same prompt.
"""

import json

from ..models.knowledge import KnowledgeSnapshot

INSTRUCTIONS = """Instruksi:
- Kamu adalah asisten yang ramah, helpful, dan natural seperti admin toko
- Pertanyaan umum/casual boleh dijawab singkat, lalu arahkan kembali ke produk/layanan toko
- Untuk pertanyaan produk/layanan: gunakan hanya info dari knowledge base di atas
- Jangan mengarang harga, jam buka, stok, atau fakta lain yang tidak ada di atas; jika tidak tahu, sarankan kontak langsung
- Maksimal 2-3 kalimat per response, jangan bertele-tele
- Jangan gunakan markdown formatting yang berlebihan
"""


def format_price(price: float) -> str:
    """Whole-number rupiah amount, e.g. 15000 -> 'Rp 15.000'."""
    return "Rp " + f"{price:,.0f}".replace(",", ".")


def build_system_prompt(snapshot: KnowledgeSnapshot, relevant_context: str = "") -> str:
    """Render a knowledge snapshot into the system prompt.

    Args:
        snapshot: Business facts for the tenant.
        relevant_context: Optional pre-formatted semantic search block.

    Returns:
        The system prompt string.
    """
    parts = [
        f"Anda adalah asisten virtual untuk {snapshot.business_name}.\n",
        f"Tone komunikasi: {snapshot.tone}.\n\n",
    ]

    if snapshot.faqs:
        parts.append("=== PERTANYAAN UMUM ===\n")
        for i, faq in enumerate(snapshot.faqs, 1):
            parts.append(f"{i}. Q: {faq.question}\n   A: {faq.answer}\n")
        parts.append("\n")

    if snapshot.products:
        parts.append("=== DAFTAR PRODUK ===\n")
        for i, product in enumerate(snapshot.products, 1):
            parts.append(f"{i}. {product.name}: {format_price(product.price)}\n")
        parts.append("\n")

    if snapshot.raw_entries:
        parts.append("=== INFORMASI TAMBAHAN ===\n")
        for entry in snapshot.raw_entries:
            parts.append(f"\n**{entry.title}** ({entry.type}):\n")
            parts.append(json.dumps(entry.content, ensure_ascii=False, indent=2, sort_keys=True, default=str))
            parts.append("\n")
        parts.append("\n")

    if relevant_context:
        parts.append("=== INFORMASI RELEVAN ===\n")
        parts.append(relevant_context.rstrip("\n"))
        parts.append("\n\n")

    parts.append(INSTRUCTIONS)
    return "".join(parts)
