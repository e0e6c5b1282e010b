"""进度显示和批量执行模块"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from . import converter
from .encoders import Encoder
from .exceptions import EncoderFailure
from .worker import is_shutdown

logger = logging.getLogger(__name__)


@dataclass
class ConversionOutcome:
    """单次编码调用的结果"""

    source: Path
    output: Path
    fmt: str
    success: bool
    error: str = ""


@dataclass
class TaskResult:
    """批量执行结果"""

    success: int = 0
    failed: int = 0
    skipped: int = 0
    interrupted: bool = False
    outcomes: List[ConversionOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.interrupted

    def record(self, outcome: ConversionOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.success:
            self.success += 1
        else:
            self.failed += 1


class GroupProgress:
    """
    一个扩展名组的进度条

    组内 WebP 和 AVIF 两遍共用一条进度条，当前所在的遍显示在标签中：
        PNG [webp] |██████········| 3/8
    """

    def __init__(self, group: str, files: int, passes: int = len(converter.OUTPUT_FORMATS)):
        self.group = group.upper()
        self.total = files * passes
        self.done = 0
        self.stage = ""
        self.lock = threading.Lock()

    def begin(self, stage: str) -> None:
        with self.lock:
            self.stage = stage
            self._render()

    def advance(self, n: int = 1) -> None:
        with self.lock:
            self.done += n
            self._render()

    def _render(self) -> None:
        if self.total == 0:
            return
        width = 24
        filled = width * self.done // self.total
        print(f"\r{self.group} [{self.stage}] |{'█' * filled}{'·' * (width - filled)}| "
              f"{self.done}/{self.total}", end="", flush=True)
        if self.done >= self.total:
            print()


class BatchProcessor:
    """
    批量处理器

    每个扩展名组分两遍执行：先对组内所有文件生成 WebP，全部结束后再生成 AVIF。
    PNG 组处理完后才开始 JPG 组。max_workers > 1 时只在同一遍内并行。
    收到中断信号后不再开始新的编码，未开始的文件既不算成功也不算失败，
    结果标记为 interrupted。
    """

    def __init__(
        self,
        encoder: Encoder,
        max_workers: int = 1,
        skip_existing: bool = False,
        show_progress: bool = False,
        sync: Optional[Callable[[], None]] = converter.sync_filesystem,
    ):
        """
        Args:
            encoder: 编码器
            max_workers: 同一遍内的最大并行数
            skip_existing: 输出文件已存在时跳过
            show_progress: 是否显示进度条
            sync: 全部完成后调用一次的同步函数
        """
        if max_workers < 1:
            raise ValueError("max_workers 必须 >= 1")
        self.encoder = encoder
        self.max_workers = max_workers
        self.skip_existing = skip_existing
        self.show_progress = show_progress
        self.sync = sync

    def process(self, directory: Path, output_dir: Path) -> TaskResult:
        """
        处理目录

        Args:
            directory: 源目录
            output_dir: 输出目录

        Returns:
            执行结果
        """
        result = TaskResult()
        try:
            for ext in converter.SOURCE_GROUPS:
                files = converter.find_files(directory, ext)
                if not files:
                    logger.debug("%s 中没有 *.%s 文件", directory, ext)
                    continue

                progress = GroupProgress(ext, len(files)) if self.show_progress else None
                for fmt in converter.OUTPUT_FORMATS:
                    if progress:
                        progress.begin(fmt)
                    tasks = self._prepare_tasks(files, output_dir, fmt, result, progress)
                    self._run_pass(tasks, fmt, result, progress)
                    if result.interrupted:
                        print("\n⚠️  已停止", flush=True)
                        return result
        finally:
            if self.sync is not None:
                self.sync()

        return result

    def _prepare_tasks(
        self,
        files: List[Path],
        output_dir: Path,
        fmt: str,
        result: TaskResult,
        progress: Optional[GroupProgress],
    ) -> List[Tuple[Path, Path]]:
        """
        准备一遍的任务列表

        Returns:
            [(输入文件，输出文件), ...]
        """
        tasks = []
        for f in files:
            out = converter.output_path(f, fmt, output_dir)
            if self.skip_existing and out.exists():
                result.skipped += 1
                if progress:
                    progress.advance()
                continue
            tasks.append((f, out))
        return tasks

    def _run_pass(
        self,
        tasks: List[Tuple[Path, Path]],
        fmt: str,
        result: TaskResult,
        progress: Optional[GroupProgress],
    ) -> None:
        """执行一遍编码，返回前所有已开始的调用都已结束"""
        if is_shutdown():
            result.interrupted = True
            return

        if self.max_workers == 1:
            outcomes = (self._convert_file(inp, out, fmt) for inp, out in tasks)
            for outcome in outcomes:
                self._report(outcome, result, progress)
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._convert_file, inp, out, fmt)
                for inp, out in tasks
            ]
            for future in as_completed(futures):
                self._report(future.result(), result, progress)

    def _convert_file(self, inp: Path, out: Path, fmt: str) -> Optional[ConversionOutcome]:
        """转换单个文件，失败时记录而不是抛出；已中断时返回 None"""
        if is_shutdown():
            return None
        try:
            converter.encode(self.encoder, fmt, inp, out)
        except EncoderFailure as e:
            return ConversionOutcome(inp, out, fmt, False, e.message)
        return ConversionOutcome(inp, out, fmt, True)

    def _report(
        self,
        outcome: Optional[ConversionOutcome],
        result: TaskResult,
        progress: Optional[GroupProgress],
    ) -> None:
        if outcome is None:
            result.interrupted = True
            return
        result.record(outcome)
        if not outcome.success:
            print(f"\n✗ {outcome.source.name} → {outcome.output.name} - {outcome.error}", flush=True)
        elif not progress:
            print(f"✓ {outcome.source.name} → {outcome.output.name}", flush=True)
        if progress:
            progress.advance()
