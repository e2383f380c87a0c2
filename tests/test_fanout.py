"""Tests for NotificationFanout: every available surface, failures isolated."""

from desk_core.fanout import SurfaceRegistry, NotificationFanout, deliver, milestone_message

from conftest import RecordingSurface


class TestMilestoneMessage:

    def test_registrations(self):
        assert milestone_message(100_000) == "\U0001F389 100,000 Registrations! \U0001F389"

    def test_money(self):
        assert milestone_message(500_000, "money") == "\U0001F389 ₹500,000 Collected! \U0001F389"


class TestSurfaceRegistry:

    def test_register_and_unregister(self):
        registry = SurfaceRegistry()
        surface = RecordingSurface()
        registry.register("overlay", surface)
        assert registry.is_live("overlay")
        assert registry.unregister("overlay")
        assert not registry.is_live("overlay")
        assert not registry.unregister("overlay")

    def test_unregister_only_matching_instance(self):
        registry = SurfaceRegistry()
        old, new = RecordingSurface(), RecordingSurface()
        registry.register("overlay", new)
        assert not registry.unregister("overlay", old)
        assert registry.is_live("overlay")


class TestAnnounce:

    def test_live_and_permanent_surfaces_all_receive(self):
        registry = SurfaceRegistry()
        overlay, notifier = RecordingSurface(), RecordingSurface()
        registry.register("overlay", overlay)
        fanout = NotificationFanout(registry, permanent=[("notification", notifier)])

        fanout.announce(100_000)

        assert overlay.announced == [100_000]
        assert notifier.announced == [100_000]

    def test_unregistered_surface_is_skipped_not_queued(self):
        registry = SurfaceRegistry()
        overlay, notifier = RecordingSurface(), RecordingSurface()
        registry.register("overlay", overlay)
        registry.unregister("overlay")
        fanout = NotificationFanout(registry)
        fanout.add_permanent("notification", notifier)

        fanout.announce(100_000)
        registry.register("overlay", overlay)

        assert overlay.announced == [] and overlay.text_only == []
        assert notifier.announced == [100_000]

    def test_overlay_crash_does_not_stop_notification(self):
        registry = SurfaceRegistry()
        overlay = RecordingSurface(fail_with=RuntimeError("widget destroyed"))
        notifier = RecordingSurface()
        registry.register("overlay", overlay)
        fanout = NotificationFanout(registry, permanent=[("notification", notifier)])

        fanout.announce(100_000)

        assert overlay.text_only == [100_000]
        assert notifier.announced == [100_000]

    def test_missing_asset_degrades_to_text(self, missing_asset):
        celebration = RecordingSurface(fail_with=missing_asset)
        fanout = NotificationFanout(SurfaceRegistry(), permanent=[("celebration", celebration)])

        fanout.announce(200_000)

        assert celebration.announced == []
        assert celebration.text_only == [200_000]

    def test_no_surfaces_is_fine(self):
        NotificationFanout(SurfaceRegistry()).announce(100_000)

    def test_dispatch_receives_each_delivery(self):
        calls = []
        notifier = RecordingSurface()
        fanout = NotificationFanout(SurfaceRegistry(), permanent=[("notification", notifier)],
                                    dispatch=lambda fn, *args: calls.append((fn, args)))

        fanout.announce(100_000)

        assert notifier.announced == []
        assert calls == [(deliver, ("notification", notifier, 100_000))]
        fn, args = calls[0]
        fn(*args)
        assert notifier.announced == [100_000]


class TestDeliver:

    def test_returns_true_on_rich_path(self):
        assert deliver("x", RecordingSurface(), 1) is True

    def test_text_fallback_failure_is_swallowed(self):
        class Broken:
            def announce(self, threshold):
                raise RuntimeError("rich")

            def announce_text(self, threshold):
                raise RuntimeError("text")

        assert deliver("broken", Broken(), 1) is False
