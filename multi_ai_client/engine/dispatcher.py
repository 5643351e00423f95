"""并发分发引擎。

Dispatcher.dispatch() 的执行过程：

1. 为每个 ModelDefinition 构造请求；任何构造错误（APIType、端点 URL）都会在启动线程之前同步抛出。
2. 每个请求由一个后台线程负责：打开流式响应、逐行解析、把增量写入共享队列。
   同时运行的线程数受 max_concurrent_streams 限制。
3. 一个汇合线程等待所有 worker 结束后关闭 DeltaFeed。

单个 worker 的网络/API 错误只会结束该 worker 自己的输出（写日志），
不会影响其他 worker；开启 report_errors 时额外输出一个带 error 标记的 DeltaChunk。
"""

import queue
import threading
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import httpx

from multi_ai_client.config.settings import settings
from multi_ai_client.domain.chat import Chat
from multi_ai_client.domain.exceptions import ApiError, BusinessError, NetworkError, NoDefinitionsError
from multi_ai_client.domain.models import DeltaChunk
from multi_ai_client.engine.stream_decoder import iter_deltas
from multi_ai_client.infrastructure.logging.logger import logger
from multi_ai_client.providers.definition import ModelDefinition
from multi_ai_client.providers.request_factory import PreparedRequest, build_request

_POLL_INTERVAL = 0.05


class DeltaFeed:
    """合并后的增量输出。

    - 迭代 DeltaFeed 会按到达顺序产出 DeltaChunk，所有 worker 结束后迭代终止。
    - 不同 index 之间的顺序不做保证；同一 index 内部保持原始顺序。
    - cancel() 通知所有 worker 尽快退出；已经入队的增量仍然可以读出。
    """

    def __init__(self, count: int, buffer_size: int):
        self.count = count
        self._queue: "queue.Queue[DeltaChunk]" = queue.Queue(maxsize=buffer_size)
        self._cancel = threading.Event()
        self._closed = threading.Event()

    # ---- 消费端 ----

    def __iter__(self) -> Iterator[DeltaChunk]:
        while True:
            try:
                chunk = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                # worker 全部结束后才会设置 closed，此时队列为空即表示读完
                if self._closed.is_set() and self._queue.empty():
                    return
                continue
            yield chunk

    def cancel(self) -> None:
        if not self._cancel.is_set() and not self._closed.is_set():
            logger.info("dispatch.cancelled", extra={"extra": {"count": self.count}})
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        return self._closed.wait(timeout)

    def __enter__(self) -> "DeltaFeed":
        return self

    def __exit__(self, *exc) -> bool:
        self.cancel()
        return False

    # ---- 生产端 ----

    def put(self, chunk: DeltaChunk) -> bool:
        """写入一个增量；队列满时阻塞，取消后返回 False。"""

        while not self._cancel.is_set():
            try:
                self._queue.put(chunk, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def close(self) -> None:
        self._closed.set()


class Dispatcher:
    """把同一段对话并发发送给多个模型，并合并它们的流式输出。"""

    def __init__(self, cfg=settings):
        self._settings = cfg

    def dispatch(
        self,
        definitions: Sequence[ModelDefinition],
        chat: Chat,
        *,
        report_errors: Optional[bool] = None,
    ) -> Tuple[int, DeltaFeed]:
        """发起所有请求，立即返回 (请求数, DeltaFeed)。

        Raises:
            NoDefinitionsError: definitions 为空。
            UnsupportedAPITypeError: 某个模型定义的 APIType 无法识别。
            InvalidEndpointError: 某个模型定义的 api_endpoint 无法解析。
        """

        if not definitions:
            raise NoDefinitionsError()
        requests: List[PreparedRequest] = [build_request(d, chat) for d in definitions]
        if report_errors is None:
            report_errors = bool(getattr(self._settings, "report_stream_errors", False))

        feed = DeltaFeed(len(requests), buffer_size=self._settings.feed_buffer_size)
        slots = threading.BoundedSemaphore(self._settings.max_concurrent_streams)
        logger.info(
            "dispatch.start",
            extra={"extra": {"count": len(requests), "models": [d.name for d in definitions]}},
        )

        workers: List[threading.Thread] = []
        for index, req in enumerate(requests):
            worker = threading.Thread(
                target=self._run_worker,
                args=(index, definitions[index].name, req, feed, slots, report_errors),
                name=f"multi-ai-stream-{index}",
                daemon=True,
            )
            workers.append(worker)

        def barrier() -> None:
            for worker in workers:
                worker.join()
            feed.close()
            logger.info("dispatch.closed", extra={"extra": {"count": len(workers)}})

        for worker in workers:
            worker.start()
        threading.Thread(target=barrier, name="multi-ai-barrier", daemon=True).start()
        return len(requests), feed

    def _run_worker(
        self,
        index: int,
        name: str,
        req: PreparedRequest,
        feed: DeltaFeed,
        slots: threading.BoundedSemaphore,
        report_errors: bool,
    ) -> None:
        with slots:
            if feed.cancelled:
                return
            try:
                emitted = self._stream(index, req, feed)
            except BusinessError as e:
                logger.warning(
                    "stream.failed",
                    extra={"extra": {"index": index, "model": name, "code": e.code, "error": e.message}},
                )
                if report_errors:
                    feed.put(DeltaChunk(index=index, delta="", error=f"{e.code}: {e.message}"))
                return
            except Exception:
                logger.exception("stream.crashed", extra={"extra": {"index": index, "model": name}})
                raise
            logger.info("stream.done", extra={"extra": {"index": index, "model": name, "chunks": emitted}})

    def _stream(self, index: int, req: PreparedRequest, feed: DeltaFeed) -> int:
        """读取一个流式响应，返回写入的增量个数。"""

        emitted = 0
        logger.info("stream.start", extra={"extra": {"index": index, "url": req.url}})
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                with client.stream(req.method, req.url, content=req.body, headers=req.headers) as resp:
                    if resp.status_code >= 400:
                        body = resp.read().decode("utf-8", errors="replace")
                        raise ApiError(
                            code="API_ERROR",
                            message=f"HTTP {resp.status_code}: {body[:500]}",
                            http_status=resp.status_code,
                        )
                    for delta in iter_deltas(_until_cancelled(resp.iter_lines(), feed)):
                        if not feed.put(DeltaChunk(index=index, delta=delta)):
                            break
                        emitted += 1
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        return emitted


def _until_cancelled(lines: Iterable[str], feed: DeltaFeed) -> Iterator[str]:
    for line in lines:
        if feed.cancelled:
            return
        yield line
