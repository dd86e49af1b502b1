"""
In-process publish/subscribe transport for scalar thruster messages.

Provides the command and feedback ports the thruster controller is wired to.
A Node delivers each published value to every callback subscribed to the
topic, either immediately on the publishing thread or from a background
delivery thread, which reproduces a transport that hands commands over on its
own thread while the simulation keeps stepping.


Classes
-------
Node
    Topic registry with synchronous or threaded delivery.
Publisher
    Handle bound to one advertised topic.


Functions
---------
asValidTopic(topic)
    Normalize a topic name, empty string if unusable.


Notes
-----
Messages are fire-and-forget single floats. Nothing is acknowledged and a late
subscriber does not see earlier messages.
"""

from typing import Callable, Dict, List, Optional
from threading import Lock, Thread
import queue
import re
from thrustersim import logger

#-----------------------------------------------------------------------------#

# Global Variables
log = logger.addLog('tport')

# Subscriber callback signature
Callback = Callable[[float], None]

# Stops the delivery thread
_STOP = object()

###############################################################################

def asValidTopic(topic:str)->str:
    """
    Normalize a topic name.


    Parameters
    ----------
    topic : str
        Candidate topic name.


    Returns
    -------
    topic : str
        Normalized name with a leading slash, or '' if nothing usable is left.


    Notes
    -----
    - Spaces become underscores.
    - '@', '~' and ':=' are removed.
    - Repeated slashes collapse, a trailing slash is dropped.

    Examples
    --------
    >>> asValidTopic('model//auv 1/joint/prop/')
    '/model/auv_1/joint/prop'
    >>> asValidTopic('@~')
    ''
    """

    name = topic.strip().replace(' ', '_')
    name = re.sub(r':=|@|~', '', name)
    name = re.sub(r'/{2,}', '/', name)
    name = name.rstrip('/')
    if (not name):
        return ''
    if (not name.startswith('/')):
        name = '/' + name
    return name

###############################################################################

class Publisher:
    """
    Handle for publishing on one topic.

    Parameters
    ----------
    node : Node
        Owning node.
    topic : str
        Advertised topic name.
    """

    def __init__(self, node:'Node', topic:str)->None:
        self.node = node
        self.topic = topic

    def publish(self, value:float)->None:
        """Send a scalar message to all subscribers of the topic."""
        self.node._dispatch(self.topic, float(value))

    def __repr__(self)->str:
        return f"Publisher({self.topic})"

###############################################################################

class Node:
    """
    Topic registry and message dispatcher.


    Parameters
    ----------
    threaded : bool, default=False
        If True, messages are queued and delivered by a daemon thread.
        Otherwise callbacks run on the publishing thread.


    Notes
    -----
    - A callback raising an exception is logged and does not stop delivery to
      other subscribers.
    - flush() blocks until every queued message has been delivered.
    """

    def __init__(self, threaded:bool = False)->None:
        self._subs: Dict[str,List[Callback]] = {}
        self._lock = Lock()
        self._queue: Optional[queue.Queue] = None
        self._thread: Optional[Thread] = None
        if (threaded):
            self._queue = queue.Queue()
            self._thread = Thread(target=self._deliverLoop,
                                  name='transport-delivery',
                                  daemon=True)
            self._thread.start()

    @property
    def threaded(self)->bool:
        """True if delivery runs on the background thread."""
        return self._thread is not None

    #--------------------------------------------------------------------------
    def subscribe(self, topic:str, callback:Callback)->bool:
        """
        Register callback on a topic.

        Parameters
        ----------
        topic : str
            Topic name, normalized with asValidTopic().
        callback : callable
            Called with each published float.

        Returns
        -------
        ok : bool
            False if the topic name is unusable.
        """

        name = asValidTopic(topic)
        if (not name):
            log.error('Invalid topic [%s]', topic)
            return False
        with self._lock:
            self._subs.setdefault(name, []).append(callback)
        log.debug('Subscribed to [%s]', name)
        return True

    #--------------------------------------------------------------------------
    def advertise(self, topic:str)->Optional[Publisher]:
        """Create a publisher for topic, None if the name is unusable."""
        name = asValidTopic(topic)
        if (not name):
            log.error('Invalid topic [%s]', topic)
            return None
        log.debug('Advertised [%s]', name)
        return Publisher(self, name)

    #--------------------------------------------------------------------------
    def _dispatch(self, topic:str, value:float)->None:
        q = self._queue
        if (q is not None):
            q.put((topic, value))
        else:
            self._deliver(topic, value)

    #--------------------------------------------------------------------------
    def _deliver(self, topic:str, value:float)->None:
        with self._lock:
            callbacks = list(self._subs.get(topic, ()))
        for cb in callbacks:
            try:
                cb(value)
            except Exception:
                log.exception('Subscriber on [%s] failed', topic)

    #--------------------------------------------------------------------------
    def _deliverLoop(self)->None:
        q = self._queue
        while True:
            item = q.get()
            try:
                if (item is _STOP):
                    return
                self._deliver(*item)
            finally:
                q.task_done()

    #--------------------------------------------------------------------------
    def flush(self)->None:
        """Wait until all queued messages are delivered."""
        if (self._queue is not None):
            self._queue.join()

    #--------------------------------------------------------------------------
    def close(self)->None:
        """Stop the delivery thread after draining the queue."""
        if (self._thread is not None):
            self._queue.put(_STOP)
            self._thread.join()
            self._thread = None
            self._queue = None
