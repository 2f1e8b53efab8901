"""正規形式 Configuration と編集モデルの相互変換"""

from __future__ import annotations

from datetime import datetime

from .codec import IdFactory, new_id, to_canonical, to_edit
from .edit import EditModel, EditRule, EditVariation
from .messages import MessageCatalog
from .models import Configuration, Rule, Variation
from .serve import ServeStrategy, project

DEFAULT_SERVE_FIELD = "defaultServe"
DISABLED_SERVE_FIELD = "disabledServe"


def rule_serve_field(rule_id: str) -> str:
    return f"rule_{rule_id}_serve"


def to_edit_model(
    config: Configuration,
    *,
    messages: MessageCatalog | None = None,
    id_factory: IdFactory = new_id,
    now: datetime | None = None,
) -> EditModel:
    """正規形式を複製して一時 ID を振り直した編集モデルを返す。

    すべてのルールは展開状態 (active=True) で始まる。
    defaultServe / disabledServe はそのまま引き継ぐ。
    """
    variations = [
        EditVariation(
            id=id_factory(),
            name=v.name,
            value=v.value,
            description=v.description,
        )
        for v in config.variations
    ]
    rules = [
        EditRule(
            id=id_factory(),
            conditions=[
                to_edit(c, messages=messages, id_factory=id_factory, now=now)
                for c in r.conditions
            ],
            serve=r.serve,
            active=True,
            name=r.name,
        )
        for r in config.rules
    ]
    model = EditModel(
        variations=variations,
        rules=rules,
        default_serve=config.default_serve,
        disabled_serve=config.disabled_serve,
        id_factory=id_factory,
        messages=messages,
    )
    model.reindex()
    return model


def to_wire_model(model: EditModel, *, disabled: bool = False) -> Configuration:
    """編集モデルから送信用の正規形式を作る。

    一時 ID と active を落とし、条件を逆変換する。入力は変更しない。
    未設定のサーブ戦略は None のまま残す (検証で弾かれる)。
    """
    return Configuration(
        disabled=disabled,
        variations=[
            Variation(name=v.name, value=v.value, description=v.description)
            for v in model.variations
        ],
        rules=[
            Rule(
                conditions=[to_canonical(c) for c in r.conditions],
                serve=r.serve,
                name=r.name,
            )
            for r in model.rules
        ],
        default_serve=model.default_serve,
        disabled_serve=model.disabled_serve,
    )


def project_serve_fields(model: EditModel) -> dict[str, ServeStrategy]:
    """フォームにバインドするサーブ戦略を返す。

    現在のバリエーション数で解決できない戦略はキーごと省き、再設定を促す。
    """
    fields: dict[str, ServeStrategy] = {}
    for rule in model.rules:
        serve = project(rule.serve, model.variations)
        if serve is not None:
            fields[rule_serve_field(rule.id)] = serve
    default_serve = project(model.default_serve, model.variations)
    if default_serve is not None:
        fields[DEFAULT_SERVE_FIELD] = default_serve
    disabled_serve = project(model.disabled_serve, model.variations)
    if disabled_serve is not None:
        fields[DISABLED_SERVE_FIELD] = disabled_serve
    return fields
