from typing import List

from aiogram.utils.markdown import hbold, hcode, hitalic
from aiogram.utils.text_decorations import html_decoration

from src.database.models import WinnerHistory

WRONG_CHAT_TEXT = "ℹ️ /winnerlist ကို group/supergroup ထဲမှာပဲ သုံးနိုင်ပါတယ်။"
EMPTY_TEXT = "📭 ဒီ group မှာ Winner History မရှိသေးပါ။"

SEPARATOR = "━━━━━━━━━━━━━━"


def format_winner_list(rows: List[WinnerHistory], limit: int = 20) -> str:
    """
    Форматирует историю победителей группы.

    Строки ожидаются от новых к старым, нумерация идет по убыванию,
    так что самый свежий победитель получает наибольший номер.
    """
    if not rows:
        return EMPTY_TEXT

    blocks = []
    for i, row in enumerate(rows):
        number = len(rows) - i
        if row.winner_username:
            who = f"@{html_decoration.quote(row.winner_username)}"
        else:
            who = hbold(row.winner_name or "Winner")
        when = row.picked_at.strftime("%d/%m/%Y, %H:%M:%S") if row.picked_at else ""
        blocks.append(
            f"🏆 {hbold(f'Winner #{number}')}\n"
            f"👤 {who}\n"
            f"💬 {hitalic(row.winner_comment or '')}\n"
            f"🕒 {hcode(when)}"
        )

    header = f"📜 {hbold('Winners History')} {hitalic(f'(Latest {limit} from this group)')}\n{SEPARATOR}"
    return header + "\n\n" + f"\n\n{SEPARATOR}\n\n".join(blocks)
