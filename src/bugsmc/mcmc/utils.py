def clean_config(mcmc_config):
    """
    Cleans the config dict and sets defaults.
    All config keys use lowercase with underscores.

    Keys:
        num_collect: Post-burn-in sampling sweeps (must be a multiple of thin_iteration)
        burn_iter: Burn-in sweeps, run but never tallied
        adapt_iter: Component-wise tuning sweeps before sampling
        thin_iteration: Tally every thin_iteration-th sweep
        clear_history: Drop earlier tallies before sampling (must be a bool;
                       checked by error_handling.validate_mcmc_config)
    """
    mcmc_config = dict(mcmc_config)

    mcmc_config.setdefault('num_collect', 1000)
    mcmc_config.setdefault('burn_iter', 0)
    mcmc_config.setdefault('adapt_iter', 0)
    mcmc_config.setdefault('thin_iteration', 1)
    mcmc_config.setdefault('clear_history', False)

    return mcmc_config
