"""
棋子数据结构

定义棋子种类、阵营以及带内部状态的棋子变体。

九种棋子中只有两种携带可变的内部状态：
- 勇士(warrior)：架势 stance，0=移动，1=弱攻，2=强攻，每次行动后循环递增
- 法师(mage)：冷却 cooldown，0=可施法攻击，>0=冷却中（此时可以移动）

这两种状态用独立的子类字段表示，而不是复用同一个整数。
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Optional


class PieceKind(Enum):
    """棋子种类枚举"""
    KING = "king"              # 王
    WARRIOR = "warrior"        # 勇士
    DEFENDER = "defender"      # 守卫
    PALADIN = "paladin"        # 圣骑士
    MAGE = "mage"              # 法师
    SPEARMAN = "spearman"      # 枪兵
    ARCHER = "archer"          # 弓箭手
    BARD = "bard"              # 吟游诗人
    ASSASSIN = "assassin"      # 刺客

    @property
    def code(self) -> int:
        """矩阵编码（1-9），黑方取负值"""
        return _KIND_CODES[self]


_KIND_CODES = {kind: index + 1 for index, kind in enumerate(PieceKind)}


class Color(Enum):
    """阵营枚举"""
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> 'Color':
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """朝向对方底线的行增量：白方在第7行向上，黑方在第0行向下"""
        return -1 if self is Color.WHITE else 1


class WarriorStance(IntEnum):
    """勇士架势"""
    MOBILE = 0           # 移动
    WEAK_STRIKE = 1      # 弱攻（半径1）
    STRONG_STRIKE = 2    # 强攻（半径2）

    def next(self) -> 'WarriorStance':
        return WarriorStance((self.value + 1) % 3)


# 法师攻击后的冷却回合数，同时也是开局时的冷却值
MAGE_STRIKE_COOLDOWN = 2

# 棋子名称映射
PIECE_NAMES = {
    PieceKind.KING: "王",
    PieceKind.WARRIOR: "勇士",
    PieceKind.DEFENDER: "守卫",
    PieceKind.PALADIN: "圣骑士",
    PieceKind.MAGE: "法师",
    PieceKind.SPEARMAN: "枪兵",
    PieceKind.ARCHER: "弓手",
    PieceKind.BARD: "诗人",
    PieceKind.ASSASSIN: "刺客",
}

# 文本棋盘中使用的单字母符号，白方大写、黑方小写
PIECE_LETTERS = {
    PieceKind.KING: 'K',
    PieceKind.WARRIOR: 'W',
    PieceKind.DEFENDER: 'D',
    PieceKind.PALADIN: 'P',
    PieceKind.MAGE: 'M',
    PieceKind.SPEARMAN: 'S',
    PieceKind.ARCHER: 'A',
    PieceKind.BARD: 'B',
    PieceKind.ASSASSIN: 'X',
}


@dataclass(frozen=True)
class Piece:
    """
    棋子基类

    不带内部状态的七种棋子直接使用该类；勇士和法师必须使用对应的子类。
    棋子是不可变值，状态变化通过生成新对象完成。
    """
    kind: PieceKind
    color: Color

    def __post_init__(self):
        expected = _VARIANTS.get(self.kind, Piece)
        if type(self) is not expected:
            raise ValueError(f"{self.kind.value} 必须使用 {expected.__name__} 表示")

    @property
    def state(self) -> Optional[int]:
        """传输格式中的附加状态，无状态棋子为None"""
        return None

    @property
    def letter(self) -> str:
        letter = PIECE_LETTERS[self.kind]
        return letter if self.color is Color.WHITE else letter.lower()

    def to_dict(self) -> Dict[str, Any]:
        """转换为传输格式 {"type", "color", "state"?}"""
        data: Dict[str, Any] = {'type': self.kind.value, 'color': self.color.value}
        if self.state is not None:
            data['state'] = self.state
        return data


@dataclass(frozen=True)
class Warrior(Piece):
    """勇士：移动 → 弱攻 → 强攻 循环"""
    stance: WarriorStance = WarriorStance.MOBILE

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, 'stance', WarriorStance(self.stance))

    @property
    def state(self) -> int:
        return int(self.stance)

    def advanced(self) -> 'Warrior':
        """完成一次行动后的勇士"""
        return replace(self, stance=self.stance.next())


@dataclass(frozen=True)
class Mage(Piece):
    """法师：冷却为0时可以十字施法，冷却中可以移动"""
    cooldown: int = 0

    def __post_init__(self):
        super().__post_init__()
        if not 0 <= self.cooldown <= MAGE_STRIKE_COOLDOWN:
            raise ValueError(f"法师冷却值超出范围: {self.cooldown}")

    @property
    def state(self) -> int:
        return self.cooldown

    @property
    def is_ready(self) -> bool:
        return self.cooldown == 0

    def fired(self) -> 'Mage':
        """施法攻击后的法师"""
        return replace(self, cooldown=MAGE_STRIKE_COOLDOWN)

    def decayed(self) -> 'Mage':
        """经过一次冷却衰减后的法师"""
        return replace(self, cooldown=max(0, self.cooldown - 1))


_VARIANTS = {
    PieceKind.WARRIOR: Warrior,
    PieceKind.MAGE: Mage,
}


def create_piece(kind: PieceKind, color: Color, state: Optional[int] = None) -> Piece:
    """
    按种类创建棋子

    Args:
        kind: 棋子种类
        color: 阵营
        state: 附加状态（勇士架势或法师冷却），其他棋子忽略

    Returns:
        Piece: 对应变体的棋子对象
    """
    if kind is PieceKind.WARRIOR:
        return Warrior(kind, color, WarriorStance(state or 0))
    if kind is PieceKind.MAGE:
        return Mage(kind, color, state or 0)
    return Piece(kind, color)


def piece_from_dict(data: Dict[str, Any]) -> Piece:
    """
    从传输格式创建棋子

    Raises:
        ValueError: 种类、阵营或状态无效
        KeyError: 缺少必要字段
    """
    state = data.get('state')
    if state is not None and (not isinstance(state, int) or isinstance(state, bool)):
        raise ValueError(f"附加状态必须是整数: {state!r}")
    return create_piece(PieceKind(data['type']), Color(data['color']), state)
