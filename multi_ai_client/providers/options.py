"""配置项定义与校验。

每个 Provider 用一组 OptionSpec 声明自己支持哪些配置项、
值的类型与取值范围。ModelSettings.set() 对每个值只做一次校验转换，
转换后的值保证可以直接写入请求 JSON。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from multi_ai_client.domain.exceptions import InvalidOptionValueError


class OptionKind(str, Enum):
    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    STRING = "string"
    STRING_LIST = "string_list"
    INT_MAP = "int_map"


@dataclass(frozen=True)
class OptionSpec:
    """单个配置项的声明。

    - name: 配置项名称，同时也是请求 JSON 中的字段名。
    - kind: 值类型。
    - minimum / maximum: 数值（或 INT_MAP 中每个值）的闭区间范围，None 表示不限制。
    - choices: STRING 类型的可选值，为空表示不限制。
    - required: 必填字段不允许被设置为 None。
    - wrap_key: 非空时，写入 JSON 的值会包装为 {wrap_key: value}。
    """

    name: str
    kind: OptionKind
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Tuple[str, ...] = ()
    required: bool = False
    wrap_key: Optional[str] = None

    def convert(self, value: Any) -> Any:
        """校验并转换一个非 None 的值，失败时抛出 InvalidOptionValueError。"""

        if self.kind == OptionKind.FLOAT:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise self._type_error(value, "a number")
            return self._check_range(float(value))
        if self.kind == OptionKind.INT:
            if isinstance(value, bool) or not isinstance(value, int):
                raise self._type_error(value, "an integer")
            return self._check_range(value)
        if self.kind == OptionKind.BOOL:
            if not isinstance(value, bool):
                raise self._type_error(value, "a boolean")
            return value
        if self.kind == OptionKind.STRING:
            if not isinstance(value, str):
                raise self._type_error(value, "a string")
            if self.choices and value not in self.choices:
                raise InvalidOptionValueError(
                    self.name,
                    f"Option {self.name!r} must be one of {list(self.choices)}, got {value!r}",
                )
            return value
        if self.kind == OptionKind.STRING_LIST:
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
                raise self._type_error(value, "a list of strings")
            if not all(isinstance(item, str) for item in value):
                raise self._type_error(value, "a list of strings")
            return tuple(value)
        if self.kind == OptionKind.INT_MAP:
            if not isinstance(value, Mapping):
                raise self._type_error(value, "a mapping of token to integer")
            converted: Dict[str, int] = {}
            for token, bias in value.items():
                if isinstance(bias, bool) or not isinstance(bias, int):
                    raise self._type_error(value, "a mapping of token to integer")
                converted[str(token)] = self._check_range(bias)
            return converted
        raise InvalidOptionValueError(self.name, f"Unsupported option kind {self.kind!r}")

    def to_wire(self, value: Any) -> Any:
        """把已转换的值变成 JSON 可序列化的形式。"""

        if isinstance(value, tuple):
            wire: Any = list(value)
        elif isinstance(value, dict):
            wire = dict(value)
        else:
            wire = value
        if self.wrap_key:
            return {self.wrap_key: wire}
        return wire

    def _check_range(self, number):
        if self.minimum is not None and number < self.minimum:
            raise self._range_error(number)
        if self.maximum is not None and number > self.maximum:
            raise self._range_error(number)
        return number

    def _range_error(self, number) -> InvalidOptionValueError:
        low = "-inf" if self.minimum is None else self.minimum
        high = "+inf" if self.maximum is None else self.maximum
        return InvalidOptionValueError(
            self.name,
            f"Option {self.name!r} must be within [{low}, {high}], got {number!r}",
        )

    def _type_error(self, value: Any, expected: str) -> InvalidOptionValueError:
        return InvalidOptionValueError(
            self.name,
            f"Option {self.name!r} must be {expected}, got {type(value).__name__}",
        )


RESPONSE_FORMATS = ("json", "plain_text")


def option_table(*specs: OptionSpec) -> Dict[str, OptionSpec]:
    """按声明顺序构造 name -> OptionSpec 映射（顺序即 JSON 字段顺序）。"""

    return {spec.name: spec for spec in specs}


