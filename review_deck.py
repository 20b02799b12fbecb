"""Flashcard review deck.

A deck holds a snapshot of one user's vocabulary, shows it in a shuffled order
that stays fixed while the collection keeps the same entries, and moves a
single-card cursor through it with three commands: ``flip``, ``advance`` and
``toggle_favorite``.

``advance`` is not immediate. The card is turned face-up at once and the cursor
only moves after a short settle delay, so the old answer is never shown on the
new card. Further ``advance`` and ``flip`` calls during that delay are dropped.
"""
import logging
import random
import threading
from collections import OrderedDict, namedtuple

from errors import StoreError

logger = logging.getLogger(__name__)

DeckView = namedtuple("DeckView", "entry has_cards position total flipped transitioning")

EMPTY_VIEW = DeckView(None, False, None, 0, False, False)


def fisher_yates(items, rng=random):
    """Return a shuffled copy of ``items``."""
    order = list(items)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def start_timer(delay, callback):
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class ReviewDeck:
    def __init__(self, update_entry=None, settle_delay=0.2, shuffle=fisher_yates, schedule=start_timer):
        """
        :param update_entry: ``update_entry(entry_id, fields)`` forwarding a change to the store.
        :param shuffle: returns a permutation of the list of ids it is given.
        :param schedule: ``schedule(delay, callback)`` returning a handle with ``cancel()``.
        """
        self.update_entry = update_entry
        self.settle_delay = settle_delay
        self.shuffle = shuffle
        self.schedule = schedule

        self.order = []
        self.position = None
        self.flipped = False
        self.transitioning = False
        self._entries = {}
        self._timer = None
        self._lock = threading.RLock()

    @property
    def is_empty(self):
        return not self.order

    def load(self, entries):
        with self._lock:
            entries = list(entries)
            if not entries:
                self._reset()
                return self.view()

            ids = [entry.id for entry in entries]
            # a stale id means the collection changed under us, same as a count change
            if len(ids) != len(self.order) or set(ids) != set(self.order):
                self._cancel_transition()
                self.order = list(self.shuffle(ids))
                self.position = 0
                self.flipped = False
                logger.debug("Shuffled a new review order of %d cards", len(self.order))
            elif not 0 <= self.position < len(self.order):
                self.position %= len(self.order)

            self._entries = {entry.id: entry.copy() for entry in entries}
            return self.view()

    def view(self):
        with self._lock:
            if self.is_empty:
                return EMPTY_VIEW
            return DeckView(
                self.current(),
                True,
                self.position,
                len(self.order),
                self.flipped,
                self.transitioning,
            )

    def current(self):
        if self.is_empty:
            return None
        return self._entries[self.order[self.position]]

    def advance(self):
        with self._lock:
            if self.is_empty or self.transitioning:
                return
            self.flipped = False
            self.transitioning = True
            self._timer = self.schedule(self.settle_delay, self._finish_advance)

    def _finish_advance(self):
        with self._lock:
            if not self.transitioning:
                return
            self.position = (self.position + 1) % len(self.order)
            self.transitioning = False
            self._timer = None

    def flip(self):
        with self._lock:
            if self.is_empty or self.transitioning:
                return
            self.flipped = not self.flipped

    def toggle_favorite(self):
        """Flip the current card's favorite flag locally, then tell the store.

        The local flag is not restored if the store rejects the update; the
        StoreError is left for the caller to report.
        """
        with self._lock:
            entry = self.current()
            if entry is None:
                return None
            entry.favorite = not entry.favorite
            favorite = entry.favorite

        if self.update_entry is not None:
            self.update_entry(entry.id, {"favorite": favorite})
        return entry

    def close(self):
        with self._lock:
            self._cancel_transition()

    def _cancel_transition(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.transitioning = False

    def _reset(self):
        self._cancel_transition()
        self.order = []
        self.position = None
        self.flipped = False
        self._entries = {}


class ReviewSessions:
    """One ReviewDeck per signed-in user, reloaded only when their entries change.

    At most ``max_decks`` decks are kept; the least recently used one is dropped
    to make room, so sessions that expire without signing out don't pile up.
    """

    def __init__(self, store, settle_delay=0.2, shuffle=fisher_yates, schedule=start_timer, max_decks=1000):
        self.store = store
        self.settle_delay = settle_delay
        self.shuffle = shuffle
        self.schedule = schedule
        self.max_decks = max_decks
        self._decks = OrderedDict()
        self._stale = set()
        self._lock = threading.Lock()
        store.add_listener(self.entries_changed)

    def current(self, user_id):
        if not user_id:
            return ReviewDeck()

        evicted = []
        with self._lock:
            deck = self._decks.get(user_id)
            needs_load = deck is None or user_id in self._stale
            if deck is None:
                deck = self._decks[user_id] = self._new_deck(user_id)
                while len(self._decks) > self.max_decks:
                    old_user, old_deck = self._decks.popitem(last=False)
                    self._stale.discard(old_user)
                    evicted.append(old_deck)
            else:
                self._decks.move_to_end(user_id)
            self._stale.discard(user_id)

        for old_deck in evicted:
            old_deck.close()
            logger.debug("Dropped least recently used review deck")

        if needs_load:
            try:
                deck.load(self.store.fetch_entries(user_id))
            except StoreError:
                with self._lock:
                    self._stale.add(user_id)
                raise
        return deck

    def entries_changed(self, user_id):
        with self._lock:
            if user_id in self._decks:
                self._stale.add(user_id)

    def discard(self, user_id):
        with self._lock:
            deck = self._decks.pop(user_id, None)
            self._stale.discard(user_id)
        if deck is not None:
            deck.close()

    def _new_deck(self, user_id):
        def update_entry(entry_id, fields):
            self.store.update_entry(user_id, entry_id, fields)

        return ReviewDeck(update_entry, self.settle_delay, self.shuffle, self.schedule)
