import asyncio

import streamlit as st
import streamlit.components.v1 as components

from domain.models import PrintMode, Transaction
from services.nota_service import needs_mode_choice, render_nota, resolve_print_mode
from services.print_service import StreamlitPrintSink, build_print_html
from services.validation_service import get_qr_size_px, get_validation_base_url

PREVIEW_PAGE_HEIGHT_PX = 420

MODE_LABELS = {
    PrintMode.SINGLE: "Satu Nota untuk Semua",
    PrintMode.PER_ITEM: "Satu Nota per Perhiasan",
}


@st.dialog("Pilihan Cetak Nota")
def print_mode_dialog(item_count: int, state_name: str):
    st.write(f"Pilih cara pencetakan surat nota untuk {item_count} item perhiasan")

    mode = st.radio(
        "Mode cetak",
        options=list(MODE_LABELS.keys()),
        format_func=lambda m: MODE_LABELS[m],
        captions=[
            f"Semua {item_count} item dicetak berurutan, maksimal 3 item per lembar",
            f"Setiap item dicetak di lembar terpisah ({item_count} lembar nota)",
        ],
        label_visibility="collapsed",
    )

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("Cetak Nota", type="primary", key="print_mode_confirm"):
            st.session_state[state_name] = mode.value
            st.rerun()
    with col_no:
        if st.button("Batal", key="print_mode_cancel"):
            st.session_state[state_name] = None
            st.rerun()


def nota_print_section(transaction: Transaction, key: str) -> None:
    """
    Print-mode gate, preview and print launcher for one transaction.
    """
    items = transaction.items
    if not items:
        st.warning("Tidak ada item untuk dicetak.")
        return

    mode_state = f"{key}_print_mode"
    st.session_state.setdefault(mode_state, None)

    if needs_mode_choice(items):
        if st.button("Pilih Mode Cetak Nota", key=f"{key}_choose_mode"):
            print_mode_dialog(len(items), mode_state)

        chosen = st.session_state[mode_state]
        if not chosen:
            st.info(f"Transaksi ini memiliki {len(items)} item. Pilih mode cetak terlebih dahulu.")
            return
        mode = resolve_print_mode(items, PrintMode(chosen))
        st.caption(f"Mode cetak: **{MODE_LABELS[mode]}**")
    else:
        mode = resolve_print_mode(items)

    base_url = get_validation_base_url()
    if not base_url:
        st.caption("VALIDATION_BASE_URL belum diset, nota dicetak tanpa QR validasi.")

    nota = asyncio.run(
        render_nota(transaction, mode, base_url, qr_size_px=get_qr_size_px())
    )

    with st.expander(f"Preview Cetak Nota ({len(nota.pages)} lembar)"):
        components.html(
            build_print_html(nota.markup, nota.stylesheet, nota.title, auto_print=False),
            height=PREVIEW_PAGE_HEIGHT_PX * len(nota.pages),
            scrolling=True,
        )

    st.warning(
        "Penting: Pastikan nota pra-cetak sudah terpasang di printer sebelum mencetak. "
        "Posisi teks akan dicetak sesuai dengan ukuran yang telah dikalibrasi."
    )

    # popup blocking is detected in the browser and reported next to the button
    StreamlitPrintSink().show_launcher(nota.markup, nota.stylesheet, title=nota.title)
