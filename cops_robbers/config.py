# config.py

class Config:
    def __init__(self):
        # ================================================================
        #                      Game rules
        # ================================================================
        self.NUMBER_OF_COPS = 1
        self.MAX_TURNS = 20              # plies of the moving phase before the robber wins
        self.ALLOW_ROBBER_ON_COP = False # standard rule: robber cannot start on a cop

        # ================================================================
        #                      MENACE
        # ================================================================
        self.START_TOKENS = 50
        self.WIN_REWARD = 3
        self.LOSS_PENALTY = 1
        self.BAG_CONTEXT = "full"        # "full" or "vertex", see bags.BagContext

        # ================================================================
        #                      Batch runs & output
        # ================================================================
        self.EPISODES = 1000
        self.SEED = None
        self.LOG_FILE = None
        self.LOG_INTERVAL = 100          # episodes between progress lines
        self.CACHE_DIR = "cached_episodes"
        self.CHART_DIR = "charts"

config = Config()
