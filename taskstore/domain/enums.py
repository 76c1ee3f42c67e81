from enum import Enum

class TaskStatus(str, Enum):
    ABERTO = "aberto"
    FAZENDO = "fazendo"
    FINALIZADO = "finalizado"

    def __str__(self):
        return self.value

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(s.value for s in cls)
