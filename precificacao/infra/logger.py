# precificacao/infra/logger.py
"""
Sistema de logging para os cálculos de precificação.

Este módulo configura e fornece loggers para registrar as operações
relevantes do sistema: precificação de itens, resumos globais,
comparativos de regime e leitura de arquivos.
"""

import logging
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional


# Flag global para habilitar/desabilitar logging
ENABLE_LOGGING = False
# Flag global para habilitar/desabilitar prints/output
ENABLE_OUTPUT = False

# Formato comum a todos os arquivos de log
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Cria (ou reconfigura) um logger que grava apenas no arquivo informado.

    O arquivo é aberto na primeira mensagem, então importar o pacote com o
    logging desligado não cria nada em disco além do diretório.
    """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    return logger

# logs/ dentro do pacote
LOGS_DIR = Path(__file__).resolve().parent.parent / "logs"

LOG_FILES = {
    "calculos": LOGS_DIR / "calculos.log",
    "comparativo": LOGS_DIR / "comparativo.log",
    "arquivos": LOGS_DIR / "arquivos.log",
    "system": LOGS_DIR / "system.log",
}

calculo_logger = setup_logger('precificacao.calculos', str(LOG_FILES["calculos"]))
comparativo_logger = setup_logger('precificacao.comparativo', str(LOG_FILES["comparativo"]))
arquivo_logger = setup_logger('precificacao.arquivos', str(LOG_FILES["arquivos"]))
system_logger = setup_logger('precificacao.system', str(LOG_FILES["system"]))


def _enabled() -> bool:
    return ENABLE_LOGGING or ENABLE_OUTPUT


def log_calculo(operation: str, data: Dict[str, Any], level: str = "info") -> None:
    """
    Registra um cálculo (item ou resumo global).

    Args:
        operation: Tipo de cálculo (item, resumo, cenario)
        data: Dados relevantes do cálculo
        level: Nível do log (debug, info, warning)
    """
    if not _enabled():
        return
    log_method = getattr(calculo_logger, level.lower(), calculo_logger.info)
    log_method(f"CALCULO_{operation.upper()}: {data}")

def log_comparacao(regimes: list, melhor: Optional[str], data: Optional[Dict[str, Any]] = None) -> None:
    """
    Registra o resultado de um comparativo de regimes.

    Args:
        regimes: Regimes avaliados, na ordem de avaliação
        melhor: Regime vencedor (None se nenhum cenário for viável)
        data: Dados adicionais (lucro por regime, margem, etc.)
    """
    if not _enabled():
        return
    log_data = {
        "regimes": regimes,
        "melhor": melhor,
        **(data or {}),
    }
    comparativo_logger.info(f"COMPARACAO: {log_data}")

def log_system_event(event: str, details: Optional[Dict[str, Any]] = None, level: str = "info") -> None:
    """Evento de ciclo de vida (início de comparativo, relatórios gerados)."""
    if not _enabled():
        return
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {details or {}}")

def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **extra: Any) -> None:
    """
    Registra a leitura de uma planilha de itens ou de um JSON de parâmetros.

    Args:
        operation: load_itens ou load_params
        file_path: Arquivo lido
        rows_processed: Itens (ou registros) aproveitados
        **extra: Campos livres anexados à mensagem
    """
    if not _enabled():
        return
    registro = dict(
        operation=operation,
        file_path=str(file_path),
        rows_processed=rows_processed,
        lido_em=datetime.now().isoformat(timespec="seconds"),
        **extra,
    )
    arquivo_logger.info(f"FILE_{operation.upper()}: {registro}")

def get_log_summary(log_type: str = "calculos", lines: int = 100) -> Optional[str]:
    """
    Últimas `lines` linhas de um dos arquivos de log.

    Returns:
        O texto das linhas, uma mensagem se o log não existir, ou None
        com o logging desligado.
    """
    if not _enabled():
        return None

    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} não encontrado."

    try:
        with open(log_file, encoding="utf-8") as fh:
            return "".join(deque(fh, maxlen=lines))
    except OSError as e:
        return f"Falha ao ler o log {log_type}: {e}"
