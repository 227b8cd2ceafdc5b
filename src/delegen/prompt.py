"""Entry-point table and the two instruction templates.

Every directive name maps to one of two template languages; aliases differ
only in the name embedded in the system prompt and in the cache key.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .exceptions import UnknownEntryPoint
from .types import Invocation

PRIMARY_ENGLISH = "take_care_of_the_rest"
PRIMARY_JAPANESE = "あとは任せた"

_ENGLISH_ALIASES = (
    "do_it",
    "go_ahead",
    "try_it",
    "just_do_it",
    "give_it_a_go",
    "help_me",
    "lend_a_hand",
    "back_me_up",
    "save_me",
    "magic",
    "abracadabra",
    "wave_your_wand",
    "perform_miracle",
    "finish_it",
    "wrap_it_up",
    "get_it_done",
    "make_it_happen",
    "deliver_it",
)

_JAPANESE_ALIASES = (
    "やって",
    "これやって",
    "進めて",
    "頼む",
    "手を貸して",
    "助けて",
    "手伝って",
    "魔法を見せて",
    "奇跡を起こして",
    "何とかして",
    "仕上げて",
    "完成させて",
    "終わらせて",
    "最後まで頼む",
    "実現して",
    "作って",
    "やり遂げて",
)

ENTRY_POINTS: Mapping[str, str] = MappingProxyType(
    {
        PRIMARY_ENGLISH: "en",
        **{name: "en" for name in _ENGLISH_ALIASES},
        PRIMARY_JAPANESE: "ja",
        **{name: "ja" for name in _JAPANESE_ALIASES},
    }
)


def _english_prompt(entry_point: str) -> str:
    return f"""\
I'm the administrator of this system. You are an AI assistant of this system \
helping with Python programming, and you are called through the \
`{entry_point}` directive. Generate Python code based on the user's input; \
your answer replaces the `{entry_point}(...)` directive in the user's file. \
Ensure the code is idiomatic, follows Python best practices, and includes \
comments for clarity. Your whole answer is parsed as Python source, so it \
must be valid Python code. **Anything that is not Python code must be in a \
comment, and you must not output anything that would prevent parsing. The \
rest of the user's file stays as it is, so do not redefine what already \
exists. (For example, if you output a `main` function it may clash with the \
user's own `main`. The `{entry_point}` directive may also sit inside a \
function body, in which case you must not output that function itself.)** \
What follows is the input of the user who uses this system:

"""


def _japanese_prompt(entry_point: str) -> str:
    return f"""\
私はこのシステムの管理者です。あなたはPythonプログラミングを支援する本システムの\
AIアシスタントであり、`{entry_point}` ディレクティブを通じて呼び出されます。\
ユーザーの入力に基づいてPythonコードを生成してください。回答はユーザーのファイル中の \
`{entry_point}(...)` ディレクティブと置き換えられます。コードはPythonのベストプラクティスに従い、\
明確さを保つための日本語のコメントを含めるようにしてください。回答はすべてPythonのソースとして\
構文解析されるため、有効なPythonコードである必要があります。**Pythonコード以外のものは\
すべてコメント内に記述する必要があり、構文解析の妨げになるものを出力してはなりません。\
そして、ディレクティブ以外のユーザー入力はそのまま残るため、重複などをしないように注意してください。\
(たとえば、 `main` 関数を出力すると、ユーザー定義の `main` 関数と衝突する可能性があります。\
あるいは、 `{entry_point}` ディレクティブは関数の中に書かれているかもしれません。\
その時にその関数ごと出力してはいけません。)** ここからは本システム利用者の入力になります:

"""


_TEMPLATES = {"en": _english_prompt, "ja": _japanese_prompt}


def language_for(entry_point: str) -> str:
    """Return the template language (``"en"`` or ``"ja"``) of *entry_point*."""
    try:
        return ENTRY_POINTS[entry_point]
    except KeyError:
        raise UnknownEntryPoint(entry_point) from None


def build_system_prompt(entry_point: str, language: str | None = None) -> str:
    """Render the instruction template for *entry_point*.

    *language* picks the template; it defaults to the entry point's own.
    """
    language = language or language_for(entry_point)
    try:
        template = _TEMPLATES[language]
    except KeyError:
        raise ValueError(f"No instruction template for language {language!r}") from None
    return template(entry_point)


def build_user_prompt(invocation: Invocation) -> str:
    """The enclosing file followed by the directive's prompt, if any."""
    text = invocation.source_text
    if invocation.prompt:
        return f"{text.rstrip()}\n\n{invocation.prompt}"
    return text


def build_messages(invocation: Invocation) -> list[dict[str, str]]:
    return [
        {
            "role": "system",
            "content": build_system_prompt(invocation.site.entry_point, invocation.language),
        },
        {"role": "user", "content": build_user_prompt(invocation)},
    ]
