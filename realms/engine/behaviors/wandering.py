"""Wandering behavior - NPCs that drift between rooms of their own zone."""

from .base import BehaviorContext, BehaviorResult, BehaviorScript, behavior


@behavior(
    name="wanders",
    description="NPC occasionally moves to an adjacent room in the same zone",
    defaults={
        "wander_enabled": True,
        "wander_chance": 0.05,
    },
)
class Wanders(BehaviorScript):
    def on_wander_tick(self, ctx: BehaviorContext) -> BehaviorResult:
        if not ctx.config.get("wander_enabled", True):
            return BehaviorResult.nothing()

        chance = ctx.config.get("wander_chance", 0.05)
        if ctx.rng.random() >= chance:
            return BehaviorResult.nothing()

        exit_info = ctx.get_random_exit(same_zone_only=True)
        if not exit_info:
            return BehaviorResult.nothing()

        direction, dest_room = exit_info
        return BehaviorResult.move(
            direction=direction,
            room_id=dest_room,
            message=f"{ctx.npc.name} leaves heading {direction}.",
        )
